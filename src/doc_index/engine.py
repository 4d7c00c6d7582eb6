"""Search engine handle owning the active index generation.

One ``SearchEngine`` is constructed per corpus and passed to every caller. It
holds a single reference to the current ``Generation``; a rebuild prepares a
complete new generation off to the side and then swaps that reference, so a
query that captured the old generation keeps reading a consistent index and
document store until it returns.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
import logging
from pathlib import Path
import threading

from opentelemetry.trace import SpanKind

from doc_index.config import Settings
from doc_index.domain.search import SearchResult
from doc_index.observability import (
    BUILD_LATENCY,
    DOCUMENTS_SKIPPED,
    INDEX_DOC_COUNT,
    PERSISTENCE_ERRORS,
    SEARCH_LATENCY,
    create_span,
    track_latency,
)
from doc_index.search.bm25_engine import BM25SearchEngine
from doc_index.search.generation import Generation
from doc_index.search.indexer import DocumentSource, IndexBuildResult, Indexer
from doc_index.search.schema import Schema, create_default_schema
from doc_index.search.snippet import DEFAULT_CONTEXT_CHARS, DEFAULT_MARKER, build_excerpt
from doc_index.search.storage import PersistenceCorruptError, PersistenceWriteError, SnapshotStore


logger = logging.getLogger(__name__)


class NotInitializedError(RuntimeError):
    """Raised when a search runs before any index was built or loaded."""


class SearchEngine:
    """Build, persist and query one corpus' full-text index."""

    def __init__(
        self,
        snapshot_path: str | Path,
        *,
        schema: Schema | None = None,
        scorer: BM25SearchEngine | None = None,
        default_max_results: int = 3,
        default_min_score: float = 0.2,
        excerpt_context_chars: int = DEFAULT_CONTEXT_CHARS,
        highlight_marker: str = DEFAULT_MARKER,
    ) -> None:
        self.schema = schema or create_default_schema()
        self.scorer = scorer or BM25SearchEngine()
        self.store = SnapshotStore(snapshot_path)
        self.default_max_results = default_max_results
        self.default_min_score = default_min_score
        self.excerpt_context_chars = excerpt_context_chars
        self.highlight_marker = highlight_marker
        self._generation: Generation | None = None
        self._swap_lock = threading.Lock()
        self._build_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> SearchEngine:
        return cls(
            settings.index_path,
            schema=create_default_schema(title_boost=settings.title_boost, body_boost=settings.body_boost),
            scorer=BM25SearchEngine(k1=settings.bm25_k1, b=settings.bm25_b),
            default_max_results=settings.default_max_results,
            default_min_score=settings.default_min_score,
            excerpt_context_chars=settings.excerpt_context_chars,
            highlight_marker=settings.highlight_marker,
        )

    @property
    def is_initialized(self) -> bool:
        return self._generation is not None

    @property
    def document_count(self) -> int:
        generation = self._generation
        return generation.doc_count if generation is not None else 0

    @property
    def generation(self) -> Generation | None:
        """The active generation; callers must treat it as read-only."""
        return self._generation

    # --- lifecycle --------------------------------------------------------

    def initialize(self) -> bool:
        """Load the persisted snapshot if present.

        Returns True when a generation was restored. A missing or corrupt
        snapshot leaves the engine uninitialized instead of failing startup.
        """

        with create_span("snapshot.load", attributes={"snapshot.path": str(self.store.path)}) as span:
            try:
                generation = self.store.load()
            except PersistenceCorruptError as exc:
                logger.warning("Ignoring corrupt snapshot %s: %s", self.store.path, exc)
                PERSISTENCE_ERRORS.labels(operation="load").inc()
                span.set_attribute("snapshot.corrupt", True)
                return False

            if generation is None:
                logger.info("No snapshot at %s; index will be empty until a build runs", self.store.path)
                return False

            self._swap(generation)
            span.set_attribute("snapshot.documents", generation.doc_count)
            logger.info(
                "Loaded generation %s with %d documents from %s",
                generation.generation_id,
                generation.doc_count,
                self.store.path,
            )
            return True

    def build_index(self, documents: Iterable[DocumentSource]) -> IndexBuildResult:
        """Rebuild the whole index from ``documents`` and persist it.

        Builds are serialized so the snapshot on disk always belongs to the
        last generation swapped in. Readers are never blocked by a build.
        """

        with self._build_lock, create_span("index.build", kind=SpanKind.INTERNAL) as span:
            with track_latency(BUILD_LATENCY):
                generation, result = Indexer(self.schema).build(documents)
                self._swap(generation)
            if result.documents_skipped:
                DOCUMENTS_SKIPPED.inc(result.documents_skipped)
            persisted = self._save_generation(generation)
            span.set_attribute("index.documents", result.documents_indexed)
            span.set_attribute("index.skipped", result.documents_skipped)
            span.set_attribute("index.persisted", persisted)
            return replace(result, persisted=persisted)

    def save(self) -> bool:
        """Persist the active generation; returns False when the write failed.

        Holds the build lock so a concurrent rebuild cannot be overwritten by
        an older generation.
        """

        with self._build_lock:
            generation = self._generation
            if generation is None:
                raise NotInitializedError("Nothing to save: no index has been built or loaded")
            return self._save_generation(generation)

    # --- queries ----------------------------------------------------------

    def search(
        self,
        query: str,
        max_results: int | None = None,
        category: str | None = None,
        min_score: float | None = None,
        offset: int = 0,
    ) -> list[SearchResult]:
        """Return ranked, filtered, paginated hits for ``query``.

        Args:
            query: Free-text query.
            max_results: Page size; defaults to ``default_max_results``.
            category: Keep only documents whose title starts with ``"<category>/"``.
            min_score: Drop hits scoring below this; defaults to ``default_min_score``.
            offset: Number of ranked hits to skip.

        Raises:
            NotInitializedError: No generation has been built or loaded yet.
            IndexCorruptionError: A ranked id is missing from the document store.
        """

        limit = self.default_max_results if max_results is None else max_results
        floor = self.default_min_score if min_score is None else min_score
        if limit < 0:
            raise ValueError("max_results must be non-negative")
        if offset < 0:
            raise ValueError("offset must be non-negative")

        # Capture once: everything below reads this generation only.
        generation = self._generation
        if generation is None:
            raise NotInitializedError("Index not initialized; build the index first")

        with (
            create_span(
                "search.query",
                attributes={"search.query": query[:100], "search.max_results": limit, "search.offset": offset},
            ) as span,
            track_latency(SEARCH_LATENCY),
        ):
            tokens = self.scorer.tokenize_query(generation.index, query)
            ranked = self.scorer.score(generation.index, tokens)

            if category:
                ranked = [hit for hit in ranked if generation.resolve(hit.doc_id).in_category(category)]
            ranked = [hit for hit in ranked if hit.score >= floor]
            page = ranked[offset : offset + limit]

            results = []
            for hit in page:
                record = generation.resolve(hit.doc_id)
                excerpt = build_excerpt(
                    record.content,
                    query,
                    context_chars=self.excerpt_context_chars,
                    marker=self.highlight_marker,
                )
                results.append(SearchResult(doc_id=record.id, score=hit.score, title=record.title, excerpt=excerpt))

            span.set_attribute("search.result_count", len(results))
            logger.debug("Query %r matched %d documents, returning %d", query, len(ranked), len(results))
            return results

    # --- internal helpers -------------------------------------------------

    def _swap(self, generation: Generation) -> None:
        with self._swap_lock:
            self._generation = generation
        INDEX_DOC_COUNT.set(generation.doc_count)

    def _save_generation(self, generation: Generation) -> bool:
        with create_span("snapshot.save", attributes={"snapshot.path": str(self.store.path)}):
            try:
                self.store.save(generation)
            except PersistenceWriteError as exc:
                logger.error("Snapshot save failed; in-memory index remains active: %s", exc, exc_info=True)
                PERSISTENCE_ERRORS.labels(operation="save").inc()
                return False
        return True
