"""Prometheus metrics for indexing and search."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


SEARCH_LATENCY = Histogram(
    "doc_index_search_latency_seconds",
    "Search query latency",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)

BUILD_LATENCY = Histogram(
    "doc_index_build_latency_seconds",
    "Full index rebuild latency",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

INDEX_DOC_COUNT = Gauge(
    "doc_index_document_count",
    "Documents in the active generation",
)

DOCUMENTS_SKIPPED = Counter(
    "doc_index_documents_skipped_total",
    "Source documents skipped during builds",
)

PERSISTENCE_ERRORS = Counter(
    "doc_index_persistence_errors_total",
    "Snapshot persistence failures",
    ["operation"],
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    metric = histogram.labels(**labels) if labels else histogram
    start = time.perf_counter()
    try:
        yield
    finally:
        metric.observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
