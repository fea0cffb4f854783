"""Utilities for turning chapter bodies into embed-ready chunks."""

from __future__ import annotations

import itertools
import re
import threading
from typing import Iterable

from booksearch.book.models import Chapter

from .models import INTRODUCTION_LABEL, Chunk

SECTION_HEADING_RE = re.compile(r"^##[ \t]+(.+)$", re.MULTILINE)
PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")
PARAGRAPH_SEPARATOR = "\n\n"
ELLIPSIS = "..."


def truncate_content(content: str, max_chars: int) -> str:
    if len(content) <= max_chars:
        return content
    return content[:max_chars] + ELLIPSIS


def split_long_content(content: str, max_chars: int) -> list[str]:
    """Pack whole paragraphs into fragments of at most `max_chars` characters.

    A paragraph that is longer than `max_chars` on its own is cut into
    fixed-size windows.
    """

    if len(content) <= max_chars:
        return [content]

    fragments: list[str] = []
    current = ""
    for paragraph in PARAGRAPH_BREAK_RE.split(content):
        for piece in _hard_split(paragraph.strip(), max_chars):
            piece = piece.strip()
            if not piece:
                continue
            if not current:
                current = piece
            elif len(current) + len(PARAGRAPH_SEPARATOR) + len(piece) > max_chars:
                fragments.append(current.strip())
                current = piece
            else:
                current = current + PARAGRAPH_SEPARATOR + piece

    if current.strip():
        fragments.append(current.strip())
    return fragments


def _hard_split(paragraph: str, max_chars: int) -> list[str]:
    if len(paragraph) <= max_chars:
        return [paragraph]
    return [paragraph[start:start + max_chars] for start in range(0, len(paragraph), max_chars)]


class Chunker:
    """Splits chapters on `##` headings, then packs paragraphs by size.

    One instance lives for the whole process so chunk ids stay unique across
    chapters, locales and rebuilds.
    """

    def __init__(self, *, max_chars: int = 1000) -> None:
        if max_chars <= 0:
            raise ValueError("max_chars must be a positive integer.")
        self.max_chars = max_chars
        self._ids = itertools.count(1)
        self._ids_lock = threading.Lock()

    def _next_id(self) -> str:
        with self._ids_lock:
            return f"chunk_{next(self._ids)}"

    def chunk_chapter(
        self,
        *,
        content: str,
        chapter_id: str,
        chapter_name: str,
        locale: str,
    ) -> list[Chunk]:
        headings = list(SECTION_HEADING_RE.finditer(content))
        preamble_end = headings[0].start() if headings else len(content)

        chunks: list[Chunk] = []
        preamble = content[:preamble_end].strip()
        if preamble:
            chunks.append(
                Chunk(
                    chunk_id=self._next_id(),
                    chapter_id=chapter_id,
                    chapter_name=chapter_name,
                    section=INTRODUCTION_LABEL,
                    content=truncate_content(preamble, self.max_chars),
                    locale=locale,
                )
            )

        for index, heading in enumerate(headings):
            body_end = headings[index + 1].start() if index + 1 < len(headings) else len(content)
            body = content[heading.end():body_end].strip()
            if not body:
                continue

            section_name = heading.group(1).strip()
            fragments = split_long_content(body, self.max_chars)
            for part, fragment in enumerate(fragments, start=1):
                label = section_name if len(fragments) == 1 else f"{section_name} (part {part})"
                chunks.append(
                    Chunk(
                        chunk_id=self._next_id(),
                        chapter_id=chapter_id,
                        chapter_name=chapter_name,
                        section=label,
                        content=fragment,
                        locale=locale,
                    )
                )
        return chunks

    def chunk_chapters(self, chapters: Iterable[Chapter]) -> list[Chunk]:
        chunks: list[Chunk] = []
        for chapter in chapters:
            chunks.extend(
                self.chunk_chapter(
                    content=chapter.content,
                    chapter_id=chapter.id,
                    chapter_name=chapter.name,
                    locale=chapter.locale,
                )
            )
        return chunks
