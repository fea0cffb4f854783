"""Semantic engine combining one embedding backend with the vector store."""

from __future__ import annotations

import logging
import threading
from typing import Sequence

from booksearch.errors import EmbeddingError, NotIndexedError, OperationCancelledError, ProviderError
from booksearch.index.cancellation import CancelToken, check_cancelled
from booksearch.index.embeddings import EmbeddingBackend
from booksearch.index.models import Chunk, SemanticHit
from booksearch.index.vector_store import InMemoryVectorStore

LOGGER = logging.getLogger("booksearch.semantic-engine")

DEFAULT_BATCH_SIZE = 100
PROBE_TEXT = "test"
PROBE_TIMEOUT_SECONDS = 5.0


class SemanticEngine:
    """Embeds chunks in sequential batches and answers similarity queries."""

    def __init__(
        self,
        *,
        embedder: EmbeddingBackend,
        store: InMemoryVectorStore | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be a positive integer.")
        self.embedder = embedder
        self.store = store or InMemoryVectorStore()
        self.batch_size = batch_size
        self._indexed = False
        self._index_lock = threading.Lock()

    @property
    def provider_name(self) -> str:
        return getattr(self.embedder, "name", self.embedder.__class__.__name__)

    @property
    def is_indexed(self) -> bool:
        return self._indexed

    def chunk_count(self) -> int:
        return self.store.count()

    def is_available(self, timeout: float = PROBE_TIMEOUT_SECONDS) -> bool:
        try:
            self.embedder.embed(PROBE_TEXT, cancel_token=CancelToken.with_timeout(timeout))
        except (EmbeddingError, OperationCancelledError) as exc:
            LOGGER.info("Embedding backend %s unavailable: %s", self.provider_name, exc)
            return False
        return True

    def index_chunks(
        self,
        chunks: Sequence[Chunk],
        *,
        cancel_token: CancelToken | None = None,
    ) -> int:
        """Embed and store `chunks`; returns how many were indexed.

        Batches run one after another. A failure leaves earlier batches in the
        store and the indexed flag as it was.
        """

        with self._index_lock:
            for start in range(0, len(chunks), self.batch_size):
                check_cancelled(cancel_token)
                batch = chunks[start:start + self.batch_size]
                vectors = self.embedder.embed_batch(
                    [chunk.content for chunk in batch], cancel_token=cancel_token
                )
                check_cancelled(cancel_token)
                if len(vectors) != len(batch):
                    raise ProviderError(
                        f"{self.provider_name} returned {len(vectors)} vectors for {len(batch)} texts"
                    )
                for chunk, vector in zip(batch, vectors):
                    chunk.embedding = vector
                self.store.append_batch(batch)
                LOGGER.debug(
                    "Indexed batch %d-%d of %d", start + 1, start + len(batch), len(chunks)
                )

            self._indexed = True
        return len(chunks)

    def search(
        self,
        query: str,
        *,
        locale: str = "",
        top_k: int = 5,
        cancel_token: CancelToken | None = None,
    ) -> list[SemanticHit]:
        if not self._indexed:
            raise NotIndexedError("index not built, build the semantic index first")
        query_vector = self.embedder.embed(query, cancel_token=cancel_token)
        return self.store.search(query_vector, locale=locale, top_k=top_k)
