"""Full-text search over a local markdown corpus."""

from doc_index.domain.search import DocumentRecord, SearchResult
from doc_index.engine import NotInitializedError, SearchEngine


__all__ = ["DocumentRecord", "NotInitializedError", "SearchEngine", "SearchResult"]
