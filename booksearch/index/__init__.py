"""Chunking, embedding and vector storage for semantic search."""

from __future__ import annotations

from .builder import BookIndexBuilder, BuildSummary, DummyEmbeddingBackend
from .cancellation import CancelToken
from .chunking import Chunker
from .embedder_factory import OllamaEmbeddingBackend, OpenAIEmbeddingBackend, create_embedding_backend
from .embeddings import EmbeddingBackend, cosine_similarity
from .models import Chunk, SemanticHit
from .vector_store import InMemoryVectorStore

__all__ = [
    "BookIndexBuilder",
    "BuildSummary",
    "CancelToken",
    "Chunk",
    "Chunker",
    "DummyEmbeddingBackend",
    "EmbeddingBackend",
    "InMemoryVectorStore",
    "OllamaEmbeddingBackend",
    "OpenAIEmbeddingBackend",
    "SemanticHit",
    "cosine_similarity",
    "create_embedding_backend",
]
