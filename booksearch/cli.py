"""Command line access to the book search operations."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import orjson

from .config_loader import load_config
from .errors import BookSearchError
from .index.cancellation import CancelToken
from .service import ALL_LOCALES, BookSearchService

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="booksearch",
        description="Browse, keyword-search and semantically search the book chapters.",
    )
    parser.add_argument("--app-config", type=Path, default=None, help="Path to app.config.yaml")
    parser.add_argument("--models-config", type=Path, default=None, help="Path to models.yaml")
    parser.add_argument("--book-path", type=Path, default=None, help="Override the book root directory")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("locales", help="List locale directories present on disk")

    chapters = sub.add_parser("chapters", help="List chapters of a locale")
    chapters.add_argument("--locale", default="es")

    read = sub.add_parser("read", help="Print a chapter or one of its sections")
    read.add_argument("chapter_id")
    read.add_argument("--section", dest="section_id", default=None)
    read.add_argument("--locale", default="es")

    book_index = sub.add_parser("book-index", help="Print the table of contents of a locale")
    book_index.add_argument("--locale", default="es")

    search = sub.add_parser("search", help="Keyword search")
    search.add_argument("query")
    search.add_argument("--locale", default="es")

    index = sub.add_parser("index", help="Build the semantic index and report what was indexed")
    index.add_argument("--locale", default=ALL_LOCALES)
    index.add_argument("--timeout", type=float, default=None, help="Deadline in seconds")

    semantic = sub.add_parser(
        "semantic",
        help="Build the semantic index for a locale, then run a semantic query against it",
    )
    semantic.add_argument("query")
    semantic.add_argument("--locale", default="es")
    semantic.add_argument("--top-k", type=int, default=None)
    semantic.add_argument("--timeout", type=float, default=None, help="Deadline in seconds")

    sub.add_parser("status", help="Report semantic backend availability")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )


def _emit(payload: Any) -> None:
    sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8"))
    sys.stdout.write("\n")


def _token(timeout: float | None) -> CancelToken | None:
    return CancelToken.with_timeout(timeout) if timeout else None


def _run(args: argparse.Namespace, service: BookSearchService, default_top_k: int) -> None:
    if args.command == "locales":
        _emit({"locales": service.available_locales()})
    elif args.command == "chapters":
        _emit([chapter.summary().to_dict() for chapter in service.list_documents(args.locale)])
    elif args.command == "read":
        if args.section_id:
            text = service.get_section(args.chapter_id, args.section_id, args.locale)
        else:
            text = service.get_document(args.chapter_id, args.locale).render()
        sys.stdout.write(text + "\n")
    elif args.command == "book-index":
        _emit(service.get_book_index(args.locale).to_dict())
    elif args.command == "search":
        hits = service.lexical_search(args.query, args.locale)
        _emit({"results": [hit.to_dict() for hit in hits], "total": len(hits)})
    elif args.command == "index":
        summary = service.build_index(args.locale, cancel_token=_token(args.timeout))
        _emit(
            {
                "locales": summary.locales,
                "chapters": summary.processed_chapters,
                "chunks": summary.total_chunks,
                "chunksPerChapter": summary.chunks_per_chapter,
            }
        )
    elif args.command == "semantic":
        token = _token(args.timeout)
        service.build_index(args.locale, cancel_token=token)
        top_k = args.top_k if args.top_k is not None else default_top_k
        hits = service.semantic_search(args.query, args.locale, top_k, cancel_token=token)
        _emit({"results": [hit.to_dict() for hit in hits], "total": len(hits)})
    elif args.command == "status":
        _emit(service.status().to_dict())


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    app_config, models_config = load_config(args.app_config, args.models_config)
    if args.book_path is not None:
        app_config = app_config.model_copy(
            update={"book": app_config.book.model_copy(update={"root": str(args.book_path)})}
        )

    try:
        service = BookSearchService.from_config(app_config, models_config, base_dir=PROJECT_ROOT)
    except FileNotFoundError as exc:
        logging.error("%s", exc)
        return 2

    try:
        _run(args, service, app_config.rag.default_top_k)
    except BookSearchError as exc:
        logging.error("%s", exc)
        return 1
    finally:
        service.close()
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
