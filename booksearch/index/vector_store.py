"""In-memory vector store with exhaustive cosine-similarity search."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .embeddings import cosine_similarity
from .locks import ReadWriteLock
from .models import Chunk, SemanticHit


class InMemoryVectorStore:
    """Holds embedded chunks for the lifetime of the process.

    Appends take the writer lock and publish the extended list in one step,
    so concurrent searches see either none or all of a batch. Duplicate
    chunks are kept.
    """

    def __init__(self) -> None:
        self._chunks: list[Chunk] = []
        self._lock = ReadWriteLock()

    def append_batch(self, chunks: Sequence[Chunk]) -> None:
        missing = [chunk.chunk_id for chunk in chunks if chunk.embedding is None]
        if missing:
            raise ValueError(f"Chunks without embeddings cannot be stored: {', '.join(missing)}")
        if not chunks:
            return
        with self._lock.write_locked():
            self._chunks = [*self._chunks, *chunks]

    def search(
        self,
        query: np.ndarray,
        *,
        locale: str = "",
        top_k: int = 5,
    ) -> list[SemanticHit]:
        if query.ndim != 1:
            raise ValueError("query must be a 1D embedding vector.")
        if top_k <= 0:
            return []

        with self._lock.read_locked():
            candidates = [
                chunk for chunk in self._chunks if not locale or chunk.locale == locale
            ]
            scored = [
                (chunk, cosine_similarity(query, chunk.embedding))
                for chunk in candidates
                if chunk.embedding is not None
            ]

        scored.sort(key=lambda item: item[1], reverse=True)
        return [SemanticHit.from_chunk(chunk, score) for chunk, score in scored[:top_k]]

    def count(self) -> int:
        with self._lock.read_locked():
            return len(self._chunks)

    def clear(self) -> None:
        with self._lock.write_locked():
            self._chunks = []

    def __len__(self) -> int:
        return self.count()
