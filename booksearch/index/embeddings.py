"""Embedding backend protocol, similarity helpers and the in-process backend."""

from __future__ import annotations

import importlib
import importlib.util
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

import numpy as np

from booksearch.errors import NotAvailableError, ProviderError

from .cancellation import CancelToken, check_cancelled

LOGGER = logging.getLogger("booksearch.embeddings")


class EmbeddingBackend(Protocol):
    """Turns text into fixed-length vectors.

    `embed_batch` preserves order: row i belongs to texts[i].
    """

    name: str

    def embed(self, text: str, *, cancel_token: CancelToken | None = None) -> np.ndarray: ...

    def embed_batch(
        self, texts: Sequence[str], *, cancel_token: CancelToken | None = None
    ) -> np.ndarray: ...

    def close(self) -> None: ...


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """dot(a, b) / (|a| |b|); 0.0 for zero vectors or mismatched lengths."""
    if a.shape != b.shape:
        return 0.0
    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    score = float(np.dot(a, b) / (norm_a * norm_b))
    return max(-1.0, min(1.0, score))


@dataclass(slots=True)
class SentenceTransformerBackend:
    """Encodes with a locally loaded `sentence-transformers` model."""

    model_name: str
    batch_size: int = 32
    device: str | None = None
    name: str = field(init=False, default="sentence-transformers")
    _model: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        sentence_transformer_cls = self._resolve_class()
        if sentence_transformer_cls is None:
            raise NotAvailableError(
                "sentence-transformers is required for the sentence-transformers backend."
            )
        LOGGER.info("Loading sentence-transformers model %s", self.model_name)
        self._model = sentence_transformer_cls(self.model_name, device=self.device)

    def embed(self, text: str, *, cancel_token: CancelToken | None = None) -> np.ndarray:
        return self.embed_batch([text], cancel_token=cancel_token)[0]

    def embed_batch(
        self, texts: Sequence[str], *, cancel_token: CancelToken | None = None
    ) -> np.ndarray:
        check_cancelled(cancel_token)
        if not texts:
            return np.empty(
                (0, self._model.get_sentence_embedding_dimension()), dtype=np.float32
            )
        try:
            embeddings = self._model.encode(
                list(texts),
                batch_size=self.batch_size,
                convert_to_numpy=True,
                normalize_embeddings=False,
                show_progress_bar=False,
            )
        except RuntimeError as exc:
            raise ProviderError(f"sentence-transformers failed: {exc}") from exc
        check_cancelled(cancel_token)
        return np.asarray(embeddings, dtype=np.float32)

    def close(self) -> None:
        return None

    @staticmethod
    def _resolve_class():
        if importlib.util.find_spec("sentence_transformers") is None:
            return None
        module = importlib.import_module("sentence_transformers")
        return getattr(module, "SentenceTransformer", None)
