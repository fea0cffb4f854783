from __future__ import annotations

from booksearch import prompts
from booksearch.service import BookSearchService

from conftest import write_chapter


def test_explain_concept_quotes_sources(service: BookSearchService) -> None:
    result = prompts.explain_concept(service, "adaptador", "es")

    assert result.description == "Explain 'adaptador' from the Gentleman Programming Book"
    assert "From 'Patrones de Diseño' (Adaptadores):" in result.text
    assert "\n\n---\n\n" in result.text
    assert result.text.count("From '") <= 5


def test_compare_patterns_uses_both_queries(service: BookSearchService) -> None:
    result = prompts.compare_patterns(service, "adaptador", "capas", "es")

    assert result.description == "Compare 'adaptador' vs 'capas'"
    assert (
        "Content about adaptador:\n## Adaptadores\nUn adaptador traduce una interfaz en otra.\n"
        "El adaptador vive en la capa de infraestructura.\n\n"
    ) in result.text
    assert "Content about capas:\n" in result.text
    assert result.text.endswith("4. Pros and cons")


def test_summarize_chapter_includes_content(service: BookSearchService) -> None:
    result = prompts.summarize_chapter(service, "clean-architecture", "en")

    assert result.description == "Summary of 'Clean Architecture'"
    assert "# Clean Architecture\n\n## Layers" in result.text
    assert prompts.TRUNCATION_MARKER not in result.text


def test_summarize_chapter_truncates_long_content(service: BookSearchService, book_root) -> None:
    body = "w" * (prompts.SUMMARY_CHAR_LIMIT + 500)
    write_chapter(book_root, "en", "09-long.mdx", f"---\nid: 'long'\norder: 9\nname: 'Long'\n---\n{body}\n")

    result = prompts.summarize_chapter(service, "long", "en")

    assert "w" * prompts.SUMMARY_CHAR_LIMIT + prompts.TRUNCATION_MARKER in result.text
    assert "w" * (prompts.SUMMARY_CHAR_LIMIT + 1) not in result.text


def test_summarize_chapter_reports_missing_input(service: BookSearchService) -> None:
    assert prompts.summarize_chapter(service, "").description == "Error: chapter_id is required"

    missing = prompts.summarize_chapter(service, "nope", "es")
    assert missing.description.startswith("Error: chapter not found")
    assert missing.text == "Could not find chapter: nope"
