"""Data structures describing parsed book chapters and keyword hits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True, frozen=True)
class Section:
    """A heading listed in a chapter's front matter."""

    name: str
    tag_id: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "tagId": self.tag_id}


@dataclass(slots=True, frozen=True)
class Chapter:
    """One parsed chapter file. Re-derived on every listing, never cached."""

    id: str
    order: int
    name: str
    locale: str
    sections: tuple[Section, ...] = ()
    content: str = ""
    file_path: str = ""

    def summary(self) -> "ChapterSummary":
        return ChapterSummary(
            id=self.id,
            order=self.order,
            name=self.name,
            sections=self.sections,
        )

    def render(self) -> str:
        return f"# {self.name}\n\n{self.content}"


@dataclass(slots=True, frozen=True)
class ChapterSummary:
    id: str
    order: int
    name: str
    sections: tuple[Section, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "order": self.order,
            "name": self.name,
            "sections": [section.to_dict() for section in self.sections],
        }


@dataclass(slots=True, frozen=True)
class BookIndex:
    """Table of contents for one locale (metadata only)."""

    locale: str
    chapters: list[ChapterSummary] = field(default_factory=list)

    @property
    def total_chapters(self) -> int:
        return len(self.chapters)

    def to_dict(self) -> dict[str, Any]:
        return {
            "locale": self.locale,
            "totalChapters": self.total_chapters,
            "chapters": [chapter.to_dict() for chapter in self.chapters],
        }


@dataclass(slots=True, frozen=True)
class SearchHit:
    """A single line matching a keyword query."""

    chapter_id: str
    chapter_name: str
    section: str
    snippet: str
    line_number: int
    relevance: float
    locale: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "chapterId": self.chapter_id,
            "chapterName": self.chapter_name,
            "section": self.section,
            "snippet": self.snippet,
            "lineNumber": self.line_number,
            "relevance": self.relevance,
            "locale": self.locale,
        }
