"""Index builder that turns book chapters into embedded chunks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence

import numpy as np

from booksearch.book.parser import BookParser

from .cancellation import CancelToken, check_cancelled
from .chunking import Chunker
from .models import Chunk

if TYPE_CHECKING:
    from booksearch.rag.engine import SemanticEngine

LOGGER = logging.getLogger("booksearch.index-builder")


@dataclass(slots=True)
class BuildSummary:
    locales: list[str]
    processed_chapters: int
    total_chunks: int
    chunks_per_chapter: dict[str, int] = field(default_factory=dict)


class BookIndexBuilder:
    """Coordinates chapter listing, chunk generation and embedding."""

    def __init__(
        self,
        *,
        parser: BookParser,
        chunker: Chunker,
        engine: "SemanticEngine",
    ) -> None:
        self.parser = parser
        self.chunker = chunker
        self.engine = engine

    def collect_chunks(self, locales: Sequence[str]) -> tuple[list[Chunk], BuildSummary]:
        all_chunks: list[Chunk] = []
        per_chapter: dict[str, int] = {}
        processed = 0

        for locale in locales:
            for chapter in self.parser.list_chapters(locale):
                chunks = self.chunker.chunk_chapter(
                    content=chapter.content,
                    chapter_id=chapter.id,
                    chapter_name=chapter.name,
                    locale=locale,
                )
                processed += 1
                per_chapter[f"{locale}/{chapter.id}"] = len(chunks)
                all_chunks.extend(chunks)

        summary = BuildSummary(
            locales=list(locales),
            processed_chapters=processed,
            total_chunks=len(all_chunks),
            chunks_per_chapter=per_chapter,
        )
        return all_chunks, summary

    def build(
        self,
        locales: Sequence[str],
        *,
        cancel_token: CancelToken | None = None,
    ) -> BuildSummary:
        chunks, summary = self.collect_chunks(locales)
        check_cancelled(cancel_token)

        LOGGER.info(
            "Indexing %d chunks from %d chapter(s) in %s",
            summary.total_chunks,
            summary.processed_chapters,
            ", ".join(summary.locales),
        )
        self.engine.index_chunks(chunks, cancel_token=cancel_token)
        LOGGER.info("Index build complete: %d chunks indexed.", summary.total_chunks)
        return summary


class DummyEmbeddingBackend:
    """Deterministic offline embedder, selected explicitly with `backend: dummy`."""

    name = "dummy"

    def __init__(self, dimension: int = 8) -> None:
        self.dimension = dimension

    def embed(self, text: str, *, cancel_token: CancelToken | None = None) -> np.ndarray:
        check_cancelled(cancel_token)
        # Spread character codes over the dimensions so different texts differ.
        vector = np.zeros(self.dimension, dtype=np.float32)
        for position, char in enumerate(text):
            vector[position % self.dimension] += (ord(char) % 97) / 97.0
        return vector

    def embed_batch(
        self, texts: Sequence[str], *, cancel_token: CancelToken | None = None
    ) -> np.ndarray:
        if not texts:
            return np.empty((0, self.dimension), dtype=np.float32)
        return np.vstack([self.embed(text, cancel_token=cancel_token) for text in texts])

    def close(self) -> None:
        return None
