"""Chapter parsing and keyword search."""

from __future__ import annotations

from .markdown import extract_section, slugify
from .models import BookIndex, Chapter, ChapterSummary, SearchHit, Section
from .parser import BookParser
from .search import LexicalSearchEngine

__all__ = [
    "BookIndex",
    "BookParser",
    "Chapter",
    "ChapterSummary",
    "LexicalSearchEngine",
    "SearchHit",
    "Section",
    "extract_section",
    "slugify",
]
