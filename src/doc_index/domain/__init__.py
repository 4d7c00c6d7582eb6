"""Domain layer: immutable value objects with no infrastructure dependencies."""

from doc_index.domain.search import DocumentRecord, SearchResult


__all__ = ["DocumentRecord", "SearchResult"]
