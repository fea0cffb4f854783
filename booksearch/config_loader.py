"""Utilities for loading project configuration files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field

DATA_DIR = Path(__file__).resolve().parent.parent / "data"

OPENAI_DEFAULT_ENDPOINT = "https://api.openai.com/v1"
OPENAI_DEFAULT_MODEL = "text-embedding-3-small"
OLLAMA_DEFAULT_ENDPOINT = "http://localhost:11434"
OLLAMA_DEFAULT_MODEL = "nomic-embed-text"


class BookConfig(BaseModel):
    root: str = "data/book"
    locales: list[str] = Field(default_factory=lambda: ["es", "en"])
    default_locale: str = Field(alias="default-locale", default="es")
    suffixes: list[str] = Field(default_factory=lambda: [".mdx", ".md"])


class SearchConfig(BaseModel):
    max_results: int = Field(alias="max-results", default=20)
    snippet_chars: int = Field(alias="snippet-chars", default=200)


class RagConfig(BaseModel):
    chunk_max_chars: int = Field(alias="chunk-max-chars", default=1000)
    embedding_batch_size: int = Field(alias="embedding-batch-size", default=100)
    default_top_k: int = Field(alias="default-top-k", default=5)
    probe_timeout_seconds: float = Field(alias="probe-timeout-seconds", default=5.0)
    probe_on_startup: bool = Field(alias="probe-on-startup", default=True)


class AppConfig(BaseModel):
    book: BookConfig = Field(default_factory=BookConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    rag: RagConfig = Field(default_factory=RagConfig)

    def book_root(self, base: Path | None = None) -> Path:
        root = Path(self.book.root).expanduser()
        if root.is_absolute() or base is None:
            return root
        return (base / root).resolve()


class ModelConfig(BaseModel):
    backend: str = "auto"
    name: str | None = None
    endpoint: str | None = None
    api_key: str | None = Field(alias="api-key", default=None, repr=False)
    device: str | None = None
    timeout_seconds: float | None = Field(alias="timeout-seconds", default=None)

    def resolved_backend(self) -> str:
        """Normalize the backend name; `auto` picks the hosted API when a key is set."""
        backend = (self.backend or "none").replace("_", "-").strip().lower()
        if backend == "auto":
            return "openai" if self.api_key else "ollama"
        if backend in {"sentence transformers", "st"}:
            return "sentence-transformers"
        return backend


class ModelsConfig(BaseModel):
    embedding_model: ModelConfig = Field(alias="embedding_model", default_factory=ModelConfig)


def _load_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_app_config(path: Path | None = None) -> AppConfig:
    """Return application config from `app.config.yaml`."""
    target = path or DATA_DIR / "app.config.yaml"
    return AppConfig.model_validate(_load_yaml(target))


def load_models_config(path: Path | None = None) -> ModelsConfig:
    """Return model selection config from `models.yaml`."""
    target = path or DATA_DIR / "models.yaml"
    return ModelsConfig.model_validate(_load_yaml(target))


def apply_env_overrides(
    app_config: AppConfig,
    models_config: ModelsConfig,
    environ: Mapping[str, str] | None = None,
) -> tuple[AppConfig, ModelsConfig]:
    """Fold environment variables into the loaded config.

    This is the only place the process environment is read; everything
    downstream receives explicit config objects.
    """

    env = os.environ if environ is None else environ

    book_path = env.get("BOOK_PATH")
    if book_path:
        app_config = app_config.model_copy(
            update={"book": app_config.book.model_copy(update={"root": book_path})}
        )

    embedding = models_config.embedding_model
    updates: dict[str, Any] = {}
    if env.get("EMBEDDING_BACKEND"):
        updates["backend"] = env["EMBEDDING_BACKEND"]
    if env.get("OPENAI_API_KEY") and not embedding.api_key:
        updates["api_key"] = env["OPENAI_API_KEY"]
    embedding = embedding.model_copy(update=updates)

    if embedding.resolved_backend() == "ollama":
        ollama_updates: dict[str, Any] = {}
        if env.get("OLLAMA_BASE_URL"):
            ollama_updates["endpoint"] = env["OLLAMA_BASE_URL"]
        if env.get("OLLAMA_EMBEDDING_MODEL"):
            ollama_updates["name"] = env["OLLAMA_EMBEDDING_MODEL"]
        embedding = embedding.model_copy(update=ollama_updates)

    models_config = models_config.model_copy(update={"embedding_model": embedding})
    return app_config, models_config


def load_config(
    app_config_path: Path | None = None,
    models_config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[AppConfig, ModelsConfig]:
    return apply_env_overrides(
        load_app_config(app_config_path),
        load_models_config(models_config_path),
        environ,
    )
