"""Service layer exposing the engine to async hosts."""

from doc_index.service_layer.search_service import SearchService


__all__ = ["SearchService"]
