"""HTTP embedding backends and the config-driven factory that selects one."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx
import numpy as np

from booksearch.config_loader import (
    OLLAMA_DEFAULT_ENDPOINT,
    OLLAMA_DEFAULT_MODEL,
    OPENAI_DEFAULT_ENDPOINT,
    OPENAI_DEFAULT_MODEL,
    AppConfig,
    ModelsConfig,
)
from booksearch.errors import (
    BatchItemError,
    MalformedResponseError,
    NotAvailableError,
    OperationCancelledError,
    ProviderError,
    ServiceUnreachableError,
    TransportError,
)

from .builder import DummyEmbeddingBackend
from .cancellation import CancelToken, check_cancelled
from .embeddings import EmbeddingBackend, SentenceTransformerBackend

LOGGER = logging.getLogger("booksearch.embedder-factory")


class _HttpEmbeddingBackend:
    """Shared session handling and error translation for HTTP backends."""

    name = "http"
    unreachable_hint = ""

    def __init__(
        self,
        *,
        model: str,
        endpoint: str,
        timeout: float,
        session: httpx.Client | None = None,
    ) -> None:
        self.model = model
        self.endpoint = endpoint
        self.timeout = timeout
        self._base_url = endpoint.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._dimension: int | None = None

    @property
    def session(self) -> httpx.Client:
        if self._session is None:
            self._session = httpx.Client(timeout=httpx.Timeout(self.timeout))
        return self._session

    def close(self) -> None:
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    def _post_json(
        self,
        path: str,
        payload: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        cancel_token: CancelToken | None = None,
    ) -> tuple[httpx.Response, Any]:
        check_cancelled(cancel_token)
        timeout = cancel_token.timeout_for(self.timeout) if cancel_token else self.timeout
        url = f"{self._base_url}{path}"
        try:
            response = self.session.post(url, json=payload, headers=headers, timeout=timeout)
        except httpx.ConnectError as exc:
            raise ServiceUnreachableError(
                f"{self.name} service unreachable at {self.endpoint}: {exc}{self.unreachable_hint}"
            ) from exc
        except httpx.TimeoutException as exc:
            if cancel_token is not None and cancel_token.cancelled:
                raise OperationCancelledError(f"{self.name} request aborted: deadline exceeded") from exc
            raise TransportError(f"{self.name} request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise TransportError(f"{self.name} transport error: {exc}") from exc
        # A cancel issued while the request was in flight discards its response.
        check_cancelled(cancel_token)

        try:
            data = response.json()
        except ValueError:
            data = None
        return response, data

    def _to_vector(self, values: Any) -> np.ndarray:
        try:
            vector = np.asarray(values, dtype=np.float32)
        except (TypeError, ValueError) as exc:
            raise MalformedResponseError(
                f"{self.name} returned a non-numeric embedding: {exc}"
            ) from exc
        return self._check_dimension(vector)

    def _check_dimension(self, vector: np.ndarray) -> np.ndarray:
        if vector.ndim != 1 or vector.shape[0] == 0:
            raise MalformedResponseError(f"{self.name} returned an empty or non-flat embedding.")
        if self._dimension is None:
            self._dimension = vector.shape[0]
        elif vector.shape[0] != self._dimension:
            raise MalformedResponseError(
                f"{self.name} embeddings changed dimension between calls "
                f"({self._dimension} -> {vector.shape[0]})."
            )
        return vector

    def _empty(self) -> np.ndarray:
        return np.empty((0, self._dimension or 0), dtype=np.float32)


class OpenAIEmbeddingBackend(_HttpEmbeddingBackend):
    """Calls a hosted OpenAI-compatible `/embeddings` API, one request per batch."""

    name = "openai"

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str = OPENAI_DEFAULT_MODEL,
        endpoint: str = OPENAI_DEFAULT_ENDPOINT,
        timeout: float = 30.0,
        session: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise NotAvailableError("OpenAI API key not set")
        super().__init__(model=model, endpoint=endpoint, timeout=timeout, session=session)
        self._api_key = api_key

    def embed(self, text: str, *, cancel_token: CancelToken | None = None) -> np.ndarray:
        return self.embed_batch([text], cancel_token=cancel_token)[0]

    def embed_batch(
        self, texts: Sequence[str], *, cancel_token: CancelToken | None = None
    ) -> np.ndarray:
        if not texts:
            return self._empty()

        response, data = self._post_json(
            "/embeddings",
            {"input": list(texts), "model": self.model},
            headers={"Authorization": f"Bearer {self._api_key}"},
            cancel_token=cancel_token,
        )
        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ProviderError(f"OpenAI error: {message}")
        if response.is_error:
            raise ProviderError(f"OpenAI returned HTTP {response.status_code}")
        if not isinstance(data, dict) or not isinstance(data.get("data"), list):
            raise MalformedResponseError("OpenAI response has no data array.")

        rows: list[np.ndarray | None] = [None] * len(texts)
        for item in data["data"]:
            index = item.get("index") if isinstance(item, dict) else None
            if not isinstance(index, int) or not 0 <= index < len(texts):
                raise MalformedResponseError(f"OpenAI response has an invalid index: {index!r}")
            rows[index] = self._to_vector(item.get("embedding") or [])

        missing = [position for position, row in enumerate(rows) if row is None]
        if missing:
            raise MalformedResponseError(f"OpenAI response is missing embeddings for {missing}")
        return np.vstack(rows)


class OllamaEmbeddingBackend(_HttpEmbeddingBackend):
    """Calls the local Ollama embeddings API, one request per text."""

    name = "ollama"
    unreachable_hint = " (is Ollama running?)"

    def __init__(
        self,
        *,
        model: str = OLLAMA_DEFAULT_MODEL,
        endpoint: str = OLLAMA_DEFAULT_ENDPOINT,
        timeout: float = 60.0,
        session: httpx.Client | None = None,
    ) -> None:
        super().__init__(model=model, endpoint=endpoint, timeout=timeout, session=session)

    def embed(self, text: str, *, cancel_token: CancelToken | None = None) -> np.ndarray:
        response, data = self._post_json(
            "/api/embeddings",
            {"model": self.model, "prompt": text},
            cancel_token=cancel_token,
        )

        if isinstance(data, dict) and data.get("error"):
            raise ProviderError(f"Ollama error: {data['error']}")
        if response.is_error:
            raise ProviderError(f"Ollama returned HTTP {response.status_code}")
        if not isinstance(data, dict) or not isinstance(data.get("embedding"), list):
            raise MalformedResponseError("Ollama embeddings API returned an unexpected format.")

        return self._to_vector(data["embedding"])

    def embed_batch(
        self, texts: Sequence[str], *, cancel_token: CancelToken | None = None
    ) -> np.ndarray:
        # Ollama has no batch endpoint; stop at the first failure.
        vectors: list[np.ndarray] = []
        for index, text in enumerate(texts):
            try:
                vectors.append(self.embed(text, cancel_token=cancel_token))
            except OperationCancelledError:
                raise
            except (ProviderError, TransportError) as exc:
                raise BatchItemError(index, exc) from exc
        if not vectors:
            return self._empty()
        return np.vstack(vectors)


def create_embedding_backend(
    models_config: ModelsConfig,
    *,
    app_config: AppConfig | None = None,
) -> EmbeddingBackend | None:
    """Instantiate the embedding backend selected in models.yaml.

    Returns None when embeddings are switched off (`backend: none`) or when
    the hosted API is selected without a key.
    """

    embedding_model = models_config.embedding_model
    backend = embedding_model.resolved_backend()

    if backend == "none":
        LOGGER.info("Semantic search disabled by configuration.")
        return None

    if backend == "openai":
        if not embedding_model.api_key:
            LOGGER.warning("OpenAI backend selected but no API key configured.")
            return None
        return OpenAIEmbeddingBackend(
            api_key=embedding_model.api_key,
            model=embedding_model.name or OPENAI_DEFAULT_MODEL,
            endpoint=embedding_model.endpoint or OPENAI_DEFAULT_ENDPOINT,
            timeout=embedding_model.timeout_seconds or 30.0,
        )

    if backend == "ollama":
        return OllamaEmbeddingBackend(
            model=embedding_model.name or OLLAMA_DEFAULT_MODEL,
            endpoint=embedding_model.endpoint or OLLAMA_DEFAULT_ENDPOINT,
            timeout=embedding_model.timeout_seconds or 60.0,
        )

    if backend == "sentence-transformers":
        if not embedding_model.name:
            raise ValueError("sentence-transformers backend requires a model name.")
        batch_size = app_config.rag.embedding_batch_size if app_config else 32
        device = embedding_model.device
        return SentenceTransformerBackend(
            model_name=embedding_model.name,
            batch_size=batch_size,
            device=None if device in {None, "", "auto"} else device,
        )

    if backend == "dummy":
        LOGGER.warning("Using dummy embeddings; semantic results will not be meaningful.")
        return DummyEmbeddingBackend()

    raise ValueError(f"Unknown embedding backend: {embedding_model.backend!r}")
