"""FastAPI entry point for the book search service."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI

from . import routes
from .config_loader import AppConfig, ModelsConfig, load_config
from .service import BookSearchService

LOGGER = logging.getLogger(__name__)


APP_ROOT = Path(__file__).resolve().parent
PROJECT_ROOT = APP_ROOT.parent


def create_app(
    app_config: AppConfig | None = None,
    models_config: ModelsConfig | None = None,
    *,
    service: BookSearchService | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Book Search",
        description="Keyword and semantic search over the chapters of a bilingual book.",
        version="0.1.0",
    )

    if app_config is None or models_config is None:
        loaded_app, loaded_models = load_config()
        app_config = app_config or loaded_app
        models_config = models_config or loaded_models

    if service is None:
        service = BookSearchService.from_config(app_config, models_config, base_dir=PROJECT_ROOT)

    app.state.app_config = app_config
    app.state.models_config = models_config
    app.state.service = service

    app.include_router(routes.router)

    @app.on_event("shutdown")
    def close_service() -> None:  # pragma: no cover - shutdown hook
        app.state.service.close()

    status = service.status()
    LOGGER.info(
        "Book search ready (locales=%s, semantic=%s)",
        ",".join(service.available_locales()) or "-",
        status.provider_name,
    )
    return app
