"""Process-wide book search service wiring parser, search and semantic index."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .book.models import BookIndex, Chapter, SearchHit
from .book.parser import BookParser
from .book.search import LexicalSearchEngine
from .config_loader import AppConfig, ModelsConfig
from .errors import NotAvailableError, NotFoundError
from .index.builder import BookIndexBuilder, BuildSummary
from .index.cancellation import CancelToken
from .index.chunking import Chunker
from .index.embedder_factory import create_embedding_backend
from .index.embeddings import EmbeddingBackend
from .index.models import SemanticHit
from .index.vector_store import InMemoryVectorStore
from .rag.engine import SemanticEngine

LOGGER = logging.getLogger("booksearch.service")

ALL_LOCALES = "all"


@dataclass(slots=True, frozen=True)
class IndexStatus:
    available: bool
    indexed: bool
    chunk_count: int
    provider_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "available": self.available,
            "indexed": self.indexed,
            "chunks": self.chunk_count,
            "provider": self.provider_name,
        }


class BookSearchService:
    """Single entry point for every book operation.

    Built once at start-up and handed to the HTTP app or the CLI. The
    semantic engine is None when no embedding backend is configured or
    reachable.
    """

    def __init__(
        self,
        *,
        parser: BookParser,
        lexical: LexicalSearchEngine,
        chunker: Chunker,
        semantic: SemanticEngine | None = None,
    ) -> None:
        self.parser = parser
        self.lexical = lexical
        self.chunker = chunker
        self.semantic = semantic

    @classmethod
    def from_config(
        cls,
        app_config: AppConfig,
        models_config: ModelsConfig,
        *,
        base_dir: Path | None = None,
        embedder: EmbeddingBackend | None = None,
    ) -> "BookSearchService":
        book_root = app_config.book_root(base_dir)
        if not book_root.is_dir():
            raise FileNotFoundError(f"Book path does not exist: {book_root}")

        parser = BookParser(
            book_root,
            locales=app_config.book.locales,
            suffixes=app_config.book.suffixes,
        )
        lexical = LexicalSearchEngine(
            parser,
            max_results=app_config.search.max_results,
            snippet_chars=app_config.search.snippet_chars,
        )
        chunker = Chunker(max_chars=app_config.rag.chunk_max_chars)

        backend = embedder or create_embedding_backend(models_config, app_config=app_config)
        semantic: SemanticEngine | None = None
        if backend is not None:
            semantic = SemanticEngine(
                embedder=backend,
                store=InMemoryVectorStore(),
                batch_size=app_config.rag.embedding_batch_size,
            )
            # Only the local service is probed; the hosted API is trusted once a key is set.
            if (
                app_config.rag.probe_on_startup
                and semantic.provider_name == "ollama"
                and not semantic.is_available(app_config.rag.probe_timeout_seconds)
            ):
                LOGGER.warning("Semantic search not available (Ollama unreachable).")
                backend.close()
                semantic = None

        if semantic is not None:
            LOGGER.info("Semantic search enabled with %s", semantic.provider_name)
        return cls(parser=parser, lexical=lexical, chunker=chunker, semantic=semantic)

    def close(self) -> None:
        if self.semantic is not None:
            self.semantic.embedder.close()

    # -- Chapters ---------------------------------------------------------

    def available_locales(self) -> list[str]:
        return self.parser.available_locales()

    def list_documents(self, locale: str) -> list[Chapter]:
        return self.parser.list_chapters(locale)

    def get_document(self, chapter_id: str, locale: str) -> Chapter:
        return self.parser.get_chapter(chapter_id, locale)

    def get_section(self, chapter_id: str, tag_id: str, locale: str) -> str:
        return self.parser.get_section(chapter_id, tag_id, locale)

    def get_book_index(self, locale: str) -> BookIndex:
        return self.parser.get_book_index(locale)

    def lexical_search(self, query: str, locale: str) -> list[SearchHit]:
        return self.lexical.search(query, locale)

    # -- Semantic index ---------------------------------------------------

    def _require_semantic(self) -> SemanticEngine:
        if self.semantic is None:
            raise NotAvailableError(
                "Semantic search not available. Configure an OpenAI API key or run Ollama locally."
            )
        return self.semantic

    def resolve_locales(self, locale_or_all: str) -> list[str]:
        if locale_or_all == ALL_LOCALES:
            return self.parser.available_locales()
        if locale_or_all not in self.parser.locales:
            raise NotFoundError(f"locale not found: {locale_or_all}")
        return [locale_or_all]

    def build_index(
        self,
        locale_or_all: str = ALL_LOCALES,
        *,
        cancel_token: CancelToken | None = None,
    ) -> BuildSummary:
        semantic = self._require_semantic()
        builder = BookIndexBuilder(parser=self.parser, chunker=self.chunker, engine=semantic)
        return builder.build(self.resolve_locales(locale_or_all), cancel_token=cancel_token)

    def semantic_search(
        self,
        query: str,
        locale: str = "",
        top_k: int = 5,
        *,
        cancel_token: CancelToken | None = None,
    ) -> list[SemanticHit]:
        semantic = self._require_semantic()
        return semantic.search(query, locale=locale, top_k=top_k, cancel_token=cancel_token)

    def status(self) -> IndexStatus:
        if self.semantic is None:
            return IndexStatus(available=False, indexed=False, chunk_count=0, provider_name="none")
        return IndexStatus(
            available=True,
            indexed=self.semantic.is_indexed,
            chunk_count=self.semantic.chunk_count(),
            provider_name=self.semantic.provider_name,
        )
