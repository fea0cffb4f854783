"""Typed failures raised by the book search core."""

from __future__ import annotations


class BookSearchError(Exception):
    """Base class for every domain failure surfaced to callers."""


class ParseError(BookSearchError):
    """Raised when a chapter file has malformed front matter."""


class NotFoundError(BookSearchError):
    """Raised for an unknown locale, chapter or section identifier."""


class NotAvailableError(BookSearchError):
    """Raised when no embedding backend is configured or reachable."""


class NotIndexedError(BookSearchError):
    """Raised when semantic search runs before a successful indexing pass."""


class OperationCancelledError(BookSearchError):
    """Raised when a caller's deadline expires or the operation is cancelled."""


class EmbeddingError(BookSearchError):
    """Base class for embedding backend failures."""


class ProviderError(EmbeddingError):
    """The embedding service answered with an error of its own."""


class MalformedResponseError(ProviderError):
    """The embedding service answered with a payload we cannot use."""


class TransportError(EmbeddingError):
    """The request never produced a usable HTTP response."""


class ServiceUnreachableError(TransportError):
    """The embedding service refused or could not accept the connection."""


class BatchItemError(EmbeddingError):
    """A sequential batch failed on one item; nothing from the batch is kept."""

    def __init__(self, index: int, cause: Exception) -> None:
        super().__init__(f"error embedding text {index}: {cause}")
        self.index = index
        self.cause = cause
