"""Async facade over a ``SearchEngine`` for event-loop hosts.

Builds read files and write the snapshot, and a search can touch a large
generation; both run on worker threads so the caller's loop stays responsive.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
import logging

from doc_index.domain.search import SearchResult
from doc_index.engine import SearchEngine
from doc_index.search.indexer import DocumentSource, IndexBuildResult


logger = logging.getLogger(__name__)


class SearchService:
    """High-level search API handed to the tool-dispatch layer."""

    def __init__(self, engine: SearchEngine) -> None:
        self.engine = engine

    async def initialize(self) -> bool:
        return await asyncio.to_thread(self.engine.initialize)

    async def search(
        self,
        query: str,
        max_results: int | None = None,
        category: str | None = None,
        min_score: float | None = None,
        offset: int = 0,
    ) -> list[SearchResult]:
        return await asyncio.to_thread(self.engine.search, query, max_results, category, min_score, offset)

    async def build_index(self, documents: Iterable[DocumentSource]) -> IndexBuildResult:
        # Lazy entries are read inside build_index, on the worker thread.
        result = await asyncio.to_thread(self.engine.build_index, documents)
        if result.errors:
            logger.info("Rebuild skipped %d document(s)", len(result.errors))
        return result
