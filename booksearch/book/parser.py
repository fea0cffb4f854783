"""Reads chapter files from the book directory tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from booksearch.errors import NotFoundError, ParseError

from .frontmatter import parse_front_matter
from .markdown import extract_section
from .models import BookIndex, Chapter

LOGGER = logging.getLogger("booksearch.parser")

DEFAULT_LOCALES = ("es", "en")
DEFAULT_SUFFIXES = (".mdx", ".md")


class BookParser:
    """Parses the `<root>/<locale>/<chapter>.mdx` layout into `Chapter` records.

    Nothing is cached: every call re-reads the files, so edits on disk show up
    on the next listing.
    """

    def __init__(
        self,
        root: Path,
        *,
        locales: Sequence[str] = DEFAULT_LOCALES,
        suffixes: Sequence[str] = DEFAULT_SUFFIXES,
    ) -> None:
        self.root = Path(root)
        self.locales = tuple(locales)
        self.suffixes = tuple(suffix.lower() for suffix in suffixes)

    def parse_chapter(self, path: Path, locale: str) -> Chapter:
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(f"error reading file {path}: {exc}") from exc

        try:
            front_matter, body = parse_front_matter(raw)
        except ParseError as exc:
            raise ParseError(f"error parsing front matter in {path}: {exc}") from exc

        return Chapter(
            id=front_matter.id,
            order=front_matter.order,
            name=front_matter.name,
            locale=locale,
            sections=front_matter.sections,
            content=body,
            file_path=str(path),
        )

    def list_chapters(self, locale: str) -> list[Chapter]:
        locale_dir = self.root / locale
        if not locale_dir.is_dir():
            raise NotFoundError(f"locale not found: {locale}")

        chapters: list[Chapter] = []
        for path in sorted(locale_dir.iterdir()):
            if not path.is_file() or path.suffix.lower() not in self.suffixes:
                continue
            try:
                chapters.append(self.parse_chapter(path, locale))
            except ParseError as exc:
                LOGGER.warning("Skipping %s: %s", path, exc)

        chapters.sort(key=lambda chapter: chapter.order)
        return chapters

    def get_chapter(self, chapter_id: str, locale: str) -> Chapter:
        for chapter in self.list_chapters(locale):
            if chapter.id == chapter_id:
                return chapter
        raise NotFoundError(f"chapter not found: {chapter_id}")

    def get_section(self, chapter_id: str, tag_id: str, locale: str) -> str:
        chapter = self.get_chapter(chapter_id, locale)
        section = extract_section(chapter.content, tag_id)
        if section is None:
            raise NotFoundError(f"section not found: {tag_id}")
        return section

    def get_book_index(self, locale: str) -> BookIndex:
        chapters = self.list_chapters(locale)
        return BookIndex(locale=locale, chapters=[chapter.summary() for chapter in chapters])

    def available_locales(self) -> list[str]:
        return [locale for locale in self.locales if (self.root / locale).is_dir()]
