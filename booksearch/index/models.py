"""Data structures shared by the indexing pipeline and the vector store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

INTRODUCTION_LABEL = "Introduction"


@dataclass(slots=True)
class Chunk:
    """Section-aligned fragment of a chapter, embedded in place once indexed."""

    chunk_id: str
    chapter_id: str
    chapter_name: str
    section: str
    content: str
    locale: str
    embedding: np.ndarray | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.chunk_id,
            "chapterId": self.chapter_id,
            "chapterName": self.chapter_name,
            "section": self.section,
            "content": self.content,
            "locale": self.locale,
        }


@dataclass(slots=True, frozen=True)
class SemanticHit:
    chapter_id: str
    chapter_name: str
    section: str
    content: str
    score: float
    locale: str

    @classmethod
    def from_chunk(cls, chunk: Chunk, score: float) -> "SemanticHit":
        return cls(
            chapter_id=chunk.chapter_id,
            chapter_name=chunk.chapter_name,
            section=chunk.section,
            content=chunk.content,
            score=score,
            locale=chunk.locale,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "chapterId": self.chapter_id,
            "chapterName": self.chapter_name,
            "section": self.section,
            "content": self.content,
            "score": self.score,
            "locale": self.locale,
        }
