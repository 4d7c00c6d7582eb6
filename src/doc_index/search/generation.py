"""The atomic (index, document store) pair produced by one build."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from uuid import uuid4

from doc_index.domain.search import DocumentRecord
from doc_index.search.inverted_index import InvertedIndex
from doc_index.search.schema import Schema


class IndexCorruptionError(RuntimeError):
    """Raised when the index references a document its store does not hold."""


@dataclass(frozen=True)
class Generation:
    """Inverted index and document store built together, swapped together."""

    index: InvertedIndex
    doc_store: Mapping[str, DocumentRecord]
    generation_id: str = field(default_factory=lambda: uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not isinstance(self.doc_store, MappingProxyType):
            object.__setattr__(self, "doc_store", MappingProxyType(dict(self.doc_store)))

    @classmethod
    def empty(cls, schema: Schema) -> Generation:
        return cls(index=InvertedIndex.empty(schema), doc_store={})

    @property
    def doc_count(self) -> int:
        return len(self.doc_store)

    def missing_doc_ids(self) -> set[str]:
        """Doc ids referenced by the index but absent from the store."""
        return {doc_id for doc_id in self.index.referenced_doc_ids() if doc_id not in self.doc_store}

    def resolve(self, doc_id: str) -> DocumentRecord:
        record = self.doc_store.get(doc_id)
        if record is None:
            msg = f"Document '{doc_id}' is indexed but missing from generation {self.generation_id}"
            raise IndexCorruptionError(msg)
        return record
