from __future__ import annotations

from pathlib import Path
from typing import Sequence

import numpy as np
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from booksearch.book.parser import BookParser
from booksearch.config_loader import AppConfig, ModelsConfig
from booksearch.errors import ProviderError
from booksearch.index.cancellation import check_cancelled
from booksearch.main import create_app
from booksearch.service import BookSearchService

ES_PATTERNS = """---
id: 'design-patterns'
order: 2
name: 'Patrones de Diseño'
titleList: [
  { name: 'Adaptadores', tagId: 'adaptadores' },
  { name: 'Puertos', tagId: 'puertos' },
]
---

Los patrones resuelven problemas recurrentes de arquitectura.

## Adaptadores

Un adaptador traduce una interfaz en otra.

El adaptador vive en la capa de infraestructura.

## Puertos

Un puerto define lo que el dominio necesita.
"""

ES_CLEAN = """---
id: 'clean-architecture'
order: 1
name: 'Arquitectura Limpia'
titleList: [
  { name: 'Capas', tagId: 'capas' },
]
---

## Capas

La arquitectura limpia organiza el código en capas concéntricas.
Las dependencias apuntan hacia el dominio.
"""

EN_CLEAN = """---
id: 'clean-architecture'
order: 1
name: 'Clean Architecture'
titleList: [
  { name: 'Layers', tagId: 'layers' },
]
---

## Layers

Clean architecture organizes code in concentric layers.
"""


def write_chapter(root: Path, locale: str, filename: str, text: str) -> Path:
    locale_dir = root / locale
    locale_dir.mkdir(parents=True, exist_ok=True)
    path = locale_dir / filename
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def book_root(tmp_path) -> Path:
    root = tmp_path / "book"
    write_chapter(root, "es", "02-patterns.mdx", ES_PATTERNS)
    write_chapter(root, "es", "01-clean.mdx", ES_CLEAN)
    write_chapter(root, "en", "01-clean.md", EN_CLEAN)
    return root


@pytest.fixture
def parser(book_root) -> BookParser:
    return BookParser(book_root)


class KeywordEmbedder:
    """Counts vocabulary hits so related texts land close together."""

    name = "keyword"
    vocabulary = ("adaptador", "puerto", "capas", "arquitectura", "dominio", "layers")

    def __init__(self, *, fail_on_call: int | None = None) -> None:
        self.batch_sizes: list[int] = []
        self.closed = False
        self.fail_on_call = fail_on_call

    def embed(self, text: str, *, cancel_token=None) -> np.ndarray:
        check_cancelled(cancel_token)
        lowered = text.lower()
        vector = np.array(
            [lowered.count(word) for word in self.vocabulary] + [1.0], dtype=np.float32
        )
        return vector

    def embed_batch(self, texts: Sequence[str], *, cancel_token=None) -> np.ndarray:
        self.batch_sizes.append(len(texts))
        if self.fail_on_call is not None and len(self.batch_sizes) == self.fail_on_call:
            raise ProviderError("keyword embedder failed")
        return np.vstack([self.embed(text, cancel_token=cancel_token) for text in texts])

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


def app_config_for(book_root: Path, **rag: object) -> AppConfig:
    return AppConfig.model_validate(
        {
            "book": {"root": str(book_root)},
            "rag": {"probe-on-startup": False, **rag},
        }
    )


@pytest.fixture
def service(book_root, embedder) -> BookSearchService:
    return BookSearchService.from_config(
        app_config_for(book_root),
        ModelsConfig.model_validate({"embedding_model": {"backend": "none"}}),
        embedder=embedder,
    )


@pytest_asyncio.fixture
async def client(book_root, service):
    app = create_app(
        app_config_for(book_root),
        ModelsConfig.model_validate({"embedding_model": {"backend": "none"}}),
        service=service,
    )
    transport = ASGITransport(app=app)
    async_client = AsyncClient(transport=transport, base_url="http://testserver", timeout=10.0)
    try:
        yield async_client
    finally:
        await async_client.aclose()
