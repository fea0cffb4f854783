"""API routers for the book search service."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from . import prompts
from .errors import (
    BookSearchError,
    EmbeddingError,
    NotAvailableError,
    NotFoundError,
    NotIndexedError,
    OperationCancelledError,
)
from .index.cancellation import CancelToken
from .service import ALL_LOCALES, BookSearchService

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "es"


# --------------------------------------------------------------------------- #
# Pydantic schemas
# --------------------------------------------------------------------------- #


class SectionItem(BaseModel):
    name: str
    tag_id: str = Field(alias="tagId")


class ChapterItem(BaseModel):
    id: str
    order: int
    name: str
    sections: list[SectionItem]


class ChapterText(BaseModel):
    chapter_id: str = Field(alias="chapterId")
    section_id: str | None = Field(alias="sectionId", default=None)
    locale: str
    text: str


class BookIndexResponse(BaseModel):
    locale: str
    total_chapters: int = Field(alias="totalChapters")
    chapters: list[ChapterItem]


class SearchHitItem(BaseModel):
    chapter_id: str = Field(alias="chapterId")
    chapter_name: str = Field(alias="chapterName")
    section: str
    snippet: str
    line_number: int = Field(alias="lineNumber")
    relevance: float
    locale: str


class SearchResponse(BaseModel):
    results: list[SearchHitItem]
    total: int


class SemanticHitItem(BaseModel):
    chapter_id: str = Field(alias="chapterId")
    chapter_name: str = Field(alias="chapterName")
    section: str
    content: str
    score: float
    locale: str


class SemanticSearchResponse(BaseModel):
    results: list[SemanticHitItem]
    total: int


class BuildIndexRequest(BaseModel):
    locale: str = ALL_LOCALES
    timeout_seconds: float | None = Field(alias="timeoutSeconds", default=None, gt=0)


class BuildIndexResponse(BaseModel):
    locales: list[str]
    chapters: int
    chunks: int
    message: str


class StatusResponse(BaseModel):
    available: bool
    indexed: bool
    chunks: int
    provider: str


class PromptResponse(BaseModel):
    description: str
    text: str


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _request_service(request: Request) -> BookSearchService:
    return request.app.state.service


def _http_error(exc: BookSearchError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, NotIndexedError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, NotAvailableError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(exc, OperationCancelledError):
        code = status.HTTP_504_GATEWAY_TIMEOUT
    elif isinstance(exc, EmbeddingError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))


def _require_text(value: str, field_name: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{field_name} is required",
        )
    return cleaned


# --------------------------------------------------------------------------- #
# Routes
# --------------------------------------------------------------------------- #


@router.get("/locales")
def list_locales(request: Request) -> dict[str, list[str]]:
    return {"locales": _request_service(request).available_locales()}


@router.get("/chapters", response_model=list[ChapterItem])
def list_chapters(request: Request, locale: str = DEFAULT_LOCALE) -> list[dict[str, Any]]:
    service = _request_service(request)
    try:
        chapters = service.list_documents(locale)
    except BookSearchError as exc:
        raise _http_error(exc) from exc
    return [chapter.summary().to_dict() for chapter in chapters]


@router.get("/chapters/{chapter_id}", response_model=ChapterText)
def read_chapter(
    request: Request,
    chapter_id: str,
    locale: str = DEFAULT_LOCALE,
    section_id: str | None = Query(default=None, alias="sectionId"),
) -> ChapterText:
    service = _request_service(request)
    try:
        if section_id:
            text = service.get_section(chapter_id, section_id, locale)
        else:
            text = service.get_document(chapter_id, locale).render()
    except BookSearchError as exc:
        raise _http_error(exc) from exc
    return ChapterText(chapterId=chapter_id, sectionId=section_id, locale=locale, text=text)


@router.get("/book-index", response_model=BookIndexResponse)
def get_book_index(request: Request, locale: str = DEFAULT_LOCALE) -> dict[str, Any]:
    service = _request_service(request)
    try:
        return service.get_book_index(locale).to_dict()
    except BookSearchError as exc:
        raise _http_error(exc) from exc


@router.get("/search", response_model=SearchResponse)
def search_book(request: Request, query: str = "", locale: str = DEFAULT_LOCALE) -> dict[str, Any]:
    cleaned = _require_text(query, "query")
    service = _request_service(request)
    try:
        hits = service.lexical_search(cleaned, locale)
    except BookSearchError as exc:
        raise _http_error(exc) from exc
    return {"results": [hit.to_dict() for hit in hits], "total": len(hits)}


@router.post("/semantic/index", response_model=BuildIndexResponse)
def build_semantic_index(request: Request, payload: BuildIndexRequest) -> BuildIndexResponse:
    service = _request_service(request)
    token = CancelToken.with_timeout(payload.timeout_seconds) if payload.timeout_seconds else None
    try:
        summary = service.build_index(payload.locale, cancel_token=token)
    except BookSearchError as exc:
        logger.warning("Semantic index build failed: %s", exc)
        raise _http_error(exc) from exc
    return BuildIndexResponse(
        locales=summary.locales,
        chapters=summary.processed_chapters,
        chunks=summary.total_chunks,
        message=(
            f"Successfully indexed {summary.total_chunks} chunks "
            f"from {len(summary.locales)} locale(s)"
        ),
    )


@router.get("/semantic/search", response_model=SemanticSearchResponse)
def semantic_search(
    request: Request,
    query: str = "",
    locale: str = DEFAULT_LOCALE,
    top_k: int | None = Query(default=None, alias="topK"),
) -> dict[str, Any]:
    cleaned = _require_text(query, "query")
    service = _request_service(request)
    if top_k is None:
        top_k = request.app.state.app_config.rag.default_top_k
    try:
        hits = service.semantic_search(cleaned, locale, top_k)
    except BookSearchError as exc:
        raise _http_error(exc) from exc
    return {"results": [hit.to_dict() for hit in hits], "total": len(hits)}


@router.get("/semantic/status", response_model=StatusResponse)
def semantic_status(request: Request) -> dict[str, Any]:
    return _request_service(request).status().to_dict()


@router.get("/prompts/explain-concept", response_model=PromptResponse)
def explain_concept_prompt(
    request: Request, concept: str = "architecture", locale: str = DEFAULT_LOCALE
) -> dict[str, str]:
    service = _request_service(request)
    try:
        return prompts.explain_concept(service, concept, locale).to_dict()
    except BookSearchError as exc:
        raise _http_error(exc) from exc


@router.get("/prompts/compare-patterns", response_model=PromptResponse)
def compare_patterns_prompt(
    request: Request,
    pattern_a: str = Query(default="clean architecture", alias="patternA"),
    pattern_b: str = Query(default="hexagonal architecture", alias="patternB"),
    locale: str = DEFAULT_LOCALE,
) -> dict[str, str]:
    service = _request_service(request)
    try:
        return prompts.compare_patterns(service, pattern_a, pattern_b, locale).to_dict()
    except BookSearchError as exc:
        raise _http_error(exc) from exc


@router.get("/prompts/summarize-chapter", response_model=PromptResponse)
def summarize_chapter_prompt(
    request: Request,
    chapter_id: str = Query(default="", alias="chapterId"),
    locale: str = DEFAULT_LOCALE,
) -> dict[str, str]:
    service = _request_service(request)
    try:
        return prompts.summarize_chapter(service, chapter_id, locale).to_dict()
    except BookSearchError as exc:
        raise _http_error(exc) from exc
