"""Semantic retrieval over the in-memory chunk index."""

from __future__ import annotations

from .engine import SemanticEngine

__all__ = [
    "SemanticEngine",
]
