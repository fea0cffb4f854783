"""Keyword search over parsed chapter bodies."""

from __future__ import annotations

from .markdown import heading_text
from .models import Chapter, SearchHit
from .parser import BookParser

MAX_RESULTS = 20
SNIPPET_CHARS = 200
ELLIPSIS = "..."


def query_terms(query: str) -> list[str]:
    """Lowercase whitespace-separated terms, duplicates dropped in first-seen order."""
    return list(dict.fromkeys(query.lower().split()))


def make_snippet(line: str, limit: int = SNIPPET_CHARS) -> str:
    if len(line) <= limit:
        return line
    return line[:limit] + ELLIPSIS


class LexicalSearchEngine:
    """Scores every body line by the share of query terms it contains."""

    def __init__(
        self,
        parser: BookParser,
        *,
        max_results: int = MAX_RESULTS,
        snippet_chars: int = SNIPPET_CHARS,
    ) -> None:
        self.parser = parser
        self.max_results = max_results
        self.snippet_chars = snippet_chars

    def search(self, query: str, locale: str) -> list[SearchHit]:
        terms = query_terms(query)
        if not terms:
            return []

        hits: list[SearchHit] = []
        for chapter in self.parser.list_chapters(locale):
            hits.extend(self._scan_chapter(chapter, terms))

        # sorted() is stable, so ties keep encounter order.
        hits = sorted(hits, key=lambda hit: hit.relevance, reverse=True)
        return hits[: self.max_results]

    def _scan_chapter(self, chapter: Chapter, terms: list[str]) -> list[SearchHit]:
        hits: list[SearchHit] = []
        current_section = ""
        # Only "\n" ends a line; form feeds and Unicode separators stay in the line.
        for line_number, raw_line in enumerate(chapter.content.split("\n"), start=1):
            line = raw_line.rstrip("\r")
            title = heading_text(line)
            if title is not None:
                current_section = title

            lowered = line.lower()
            matches = sum(1 for term in terms if term in lowered)
            if not matches:
                continue

            hits.append(
                SearchHit(
                    chapter_id=chapter.id,
                    chapter_name=chapter.name,
                    section=current_section,
                    snippet=make_snippet(line, self.snippet_chars),
                    line_number=line_number,
                    relevance=matches / len(terms),
                    locale=chapter.locale,
                )
            )
        return hits
