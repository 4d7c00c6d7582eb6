"""Observability module for OpenTelemetry tracing, Prometheus metrics, and logging."""

from doc_index.observability.context import get_trace_context, set_trace_context, trace_context
from doc_index.observability.logging import JsonFormatter, configure_logging
from doc_index.observability.metrics import (
    BUILD_LATENCY,
    DOCUMENTS_SKIPPED,
    INDEX_DOC_COUNT,
    PERSISTENCE_ERRORS,
    SEARCH_LATENCY,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from doc_index.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "BUILD_LATENCY",
    "DOCUMENTS_SKIPPED",
    "INDEX_DOC_COUNT",
    "PERSISTENCE_ERRORS",
    "SEARCH_LATENCY",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
