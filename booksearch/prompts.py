"""Prompt templates grounded in keyword hits from the book."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .book.models import SearchHit
from .errors import NotFoundError
from .service import BookSearchService

BOOK_TITLE = "Gentleman Programming Book"
EXPLAIN_SNIPPETS = 5
COMPARE_SNIPPETS = 3
SUMMARY_CHAR_LIMIT = 10000
TRUNCATION_MARKER = "\n\n... [content truncated]"


@dataclass(slots=True, frozen=True)
class PromptResult:
    description: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"description": self.description, "text": self.text}


def _join_snippets(hits: list[SearchHit], limit: int, *, with_source: bool) -> str:
    if with_source:
        parts = [
            f"From '{hit.chapter_name}' ({hit.section}):\n{hit.snippet}" for hit in hits[:limit]
        ]
        return "\n\n---\n\n".join(parts)
    return "\n".join(hit.snippet for hit in hits[:limit])


def explain_concept(
    service: BookSearchService,
    concept: str = "architecture",
    locale: str = "es",
) -> PromptResult:
    hits = service.lexical_search(concept, locale)
    context = _join_snippets(hits, EXPLAIN_SNIPPETS, with_source=True)
    text = (
        f'Based on the {BOOK_TITLE}, explain the concept of "{concept}".\n\n'
        "Here is relevant content from the book:\n\n"
        f"{context}\n\n"
        "Please provide a clear and comprehensive explanation based on this content."
    )
    return PromptResult(description=f"Explain '{concept}' from the {BOOK_TITLE}", text=text)


def compare_patterns(
    service: BookSearchService,
    pattern_a: str = "clean architecture",
    pattern_b: str = "hexagonal architecture",
    locale: str = "es",
) -> PromptResult:
    context_a = _join_snippets(service.lexical_search(pattern_a, locale), COMPARE_SNIPPETS, with_source=False)
    context_b = _join_snippets(service.lexical_search(pattern_b, locale), COMPARE_SNIPPETS, with_source=False)
    text = (
        f'Compare and contrast "{pattern_a}" and "{pattern_b}" based on the {BOOK_TITLE}.\n\n'
        f"Content about {pattern_a}:\n{context_a}\n\n"
        f"Content about {pattern_b}:\n{context_b}\n\n"
        "Please provide a detailed comparison including:\n"
        "1. Key differences\n"
        "2. Similarities\n"
        "3. When to use each one\n"
        "4. Pros and cons"
    )
    return PromptResult(description=f"Compare '{pattern_a}' vs '{pattern_b}'", text=text)


def summarize_chapter(
    service: BookSearchService,
    chapter_id: str,
    locale: str = "es",
) -> PromptResult:
    if not chapter_id:
        return PromptResult(
            description="Error: chapter_id is required",
            text="Please provide a chapter_id to summarize.",
        )
    try:
        chapter = service.get_document(chapter_id, locale)
    except NotFoundError as exc:
        return PromptResult(
            description=f"Error: {exc}",
            text=f"Could not find chapter: {chapter_id}",
        )

    content = chapter.content
    if len(content) > SUMMARY_CHAR_LIMIT:
        content = content[:SUMMARY_CHAR_LIMIT] + TRUNCATION_MARKER

    text = (
        f"Please provide a comprehensive summary of the following chapter from the {BOOK_TITLE}:\n\n"
        f"# {chapter.name}\n\n"
        f"{content}\n\n"
        "Include:\n"
        "1. Main concepts covered\n"
        "2. Key takeaways\n"
        "3. Practical applications"
    )
    return PromptResult(description=f"Summary of '{chapter.name}'", text=text)
