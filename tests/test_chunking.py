from __future__ import annotations

import pytest

from booksearch.index.chunking import Chunker, split_long_content, truncate_content
from booksearch.index.models import INTRODUCTION_LABEL


def _chunk(chunker: Chunker, content: str):
    return chunker.chunk_chapter(
        content=content, chapter_id="ch", chapter_name="Chapter", locale="es"
    )


def test_chunker_splits_on_second_level_headings() -> None:
    content = "Intro text.\n\n## First\nAlpha.\n\n### Nested\nStill first.\n\n## Second\nBeta."
    chunks = _chunk(Chunker(), content)

    assert [chunk.section for chunk in chunks] == [INTRODUCTION_LABEL, "First", "Second"]
    assert chunks[0].content == "Intro text."
    assert "### Nested" in chunks[1].content
    assert chunks[2].content == "Beta."
    assert all(chunk.chapter_id == "ch" and chunk.locale == "es" for chunk in chunks)
    assert all(chunk.embedding is None for chunk in chunks)


def test_headings_without_body_are_skipped() -> None:
    chunks = _chunk(Chunker(), "## Empty\n\n## Full\nText")

    assert [chunk.section for chunk in chunks] == ["Full"]


def test_long_introduction_is_truncated() -> None:
    chunks = _chunk(Chunker(max_chars=10), "x" * 25 + "\n\n## Section\nshort")

    assert chunks[0].section == INTRODUCTION_LABEL
    assert chunks[0].content == "x" * 10 + "..."


def test_long_section_is_split_into_parts() -> None:
    paragraphs = [f"paragraph {i} " + "y" * 30 for i in range(6)]
    content = "## Big\n" + "\n\n".join(paragraphs)
    chunks = _chunk(Chunker(max_chars=100), content)

    assert len(chunks) > 1
    assert [chunk.section for chunk in chunks] == [
        f"Big (part {part})" for part in range(1, len(chunks) + 1)
    ]
    assert all(len(chunk.content) <= 100 for chunk in chunks)
    joined = "\n\n".join(chunk.content for chunk in chunks)
    for paragraph in paragraphs:
        assert paragraph in joined


def test_split_long_content_keeps_short_text_whole() -> None:
    assert split_long_content("short\n\ntext", 100) == ["short\n\ntext"]


def test_oversized_paragraph_is_hard_split() -> None:
    fragments = split_long_content("z" * 25, 10)

    assert fragments == ["z" * 10, "z" * 10, "z" * 5]


def test_whitespace_tail_of_oversized_paragraph_is_dropped() -> None:
    chunks = _chunk(Chunker(max_chars=10), "## S\n" + "a" * 10 + "  \n\n" + "b" * 10)

    assert [chunk.section for chunk in chunks] == ["S (part 1)", "S (part 2)"]
    assert [chunk.content for chunk in chunks] == ["a" * 10, "b" * 10]
    assert split_long_content("c" * 10 + " " * 10, 10) == ["c" * 10]


def test_truncate_content() -> None:
    assert truncate_content("abc", 5) == "abc"
    assert truncate_content("abcdef", 5) == "abcde..."


def test_chunk_ids_increase_across_chapters() -> None:
    chunker = Chunker()
    first = _chunk(chunker, "Intro\n\n## A\none")
    second = _chunk(chunker, "## B\ntwo")

    ids = [chunk.chunk_id for chunk in first + second]
    assert ids == ["chunk_1", "chunk_2", "chunk_3"]


@pytest.mark.parametrize("max_chars", [0, -5])
def test_chunker_validates_max_chars(max_chars: int) -> None:
    with pytest.raises(ValueError):
        Chunker(max_chars=max_chars)
