"""In-memory inverted index for the markdown search stack.

* ``IndexWriter`` - accepts ``DocumentRecord`` instances in order and produces an
  immutable ``InvertedIndex``.
* ``InvertedIndex`` - term to postings mapping plus the per-field lengths and
  build-time document order that scoring needs, with a private
  ``to_dict``/``from_dict`` pair used by the snapshot store.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from doc_index.domain.search import DocumentRecord
from doc_index.search.analyzers import get_analyzer
from doc_index.search.models import Posting
from doc_index.search.schema import Schema, TextField


class IndexWriterError(ValueError):
    """Raised when a document cannot be added to the writer."""


@dataclass(frozen=True)
class InvertedIndex:
    """Immutable term -> postings mapping for one generation."""

    schema: Schema
    postings: Mapping[str, tuple[Posting, ...]]
    field_lengths: Mapping[str, Mapping[str, int]]
    doc_order: tuple[str, ...]
    _ranks: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        ranks = {doc_id: idx for idx, doc_id in enumerate(self.doc_order)}
        object.__setattr__(self, "_ranks", MappingProxyType(ranks))

    @classmethod
    def empty(cls, schema: Schema) -> InvertedIndex:
        return cls(schema=schema, postings=MappingProxyType({}), field_lengths=MappingProxyType({}), doc_order=())

    @property
    def doc_count(self) -> int:
        return len(self.doc_order)

    def rank_of(self, doc_id: str) -> int:
        """Build-time insertion position of ``doc_id``; used to break score ties."""
        return self._ranks.get(doc_id, len(self._ranks))

    def get_postings(self, term: str, field_name: str | None = None) -> tuple[Posting, ...]:
        postings = self.postings.get(term, ())
        if field_name is None:
            return postings
        return tuple(posting for posting in postings if posting.field == field_name)

    def referenced_doc_ids(self) -> Iterator[str]:
        """Yield every doc id the index refers to, in order then from postings."""
        yield from self.doc_order
        for postings in self.postings.values():
            for posting in postings:
                yield posting.doc_id

    def to_dict(self) -> dict[str, Any]:
        """Serialize with minimal keys: s=schema, o=doc order, p=postings."""
        return {
            "s": self.schema.to_dict(),
            "o": list(self.doc_order),
            "p": {term: [posting.to_dict() for posting in postings] for term, postings in self.postings.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> InvertedIndex:
        schema = Schema.from_dict(data["s"])
        doc_order = tuple(str(doc_id) for doc_id in data["o"])
        if len(set(doc_order)) != len(doc_order):
            raise ValueError("Index document order contains duplicate ids")
        raw_postings = data["p"]
        if not isinstance(raw_postings, Mapping):
            raise ValueError("Index postings must be a mapping")
        postings = {
            str(term): tuple(Posting.from_dict(entry) for entry in entries) for term, entries in raw_postings.items()
        }
        return cls(
            schema=schema,
            postings=MappingProxyType(postings),
            field_lengths=_derive_field_lengths(postings),
            doc_order=doc_order,
        )


def _derive_field_lengths(postings: Mapping[str, tuple[Posting, ...]]) -> Mapping[str, Mapping[str, int]]:
    """Reconstruct field lengths from postings by summing frequencies per doc."""
    field_lengths: dict[str, dict[str, int]] = defaultdict(dict)
    for posting_list in postings.values():
        for posting in posting_list:
            lengths = field_lengths[posting.field]
            lengths[posting.doc_id] = lengths.get(posting.doc_id, 0) + posting.frequency
    return MappingProxyType({name: MappingProxyType(lengths) for name, lengths in field_lengths.items()})


class IndexWriter:
    """Builds an inverted index from documents added in order."""

    def __init__(self, schema: Schema) -> None:
        self.schema = schema
        self._analyzers = {f.name: get_analyzer(f.analyzer_name) for f in schema.text_fields}
        self._postings: dict[str, list[Posting]] = defaultdict(list)
        self._field_lengths: dict[str, dict[str, int]] = defaultdict(dict)
        self._doc_order: list[str] = []
        self._seen: set[str] = set()

    def add_document(self, record: DocumentRecord) -> str:
        doc_id = record.id
        if doc_id in self._seen:
            msg = f"Duplicate document for unique field '{self.schema.unique_field}': {doc_id}"
            raise IndexWriterError(msg)

        for text_field in self.schema.text_fields:
            self._index_field(doc_id, text_field, getattr(record, text_field.name, ""))

        self._seen.add(doc_id)
        self._doc_order.append(doc_id)
        return doc_id

    def build(self) -> InvertedIndex:
        return InvertedIndex(
            schema=self.schema,
            postings=MappingProxyType({term: tuple(postings) for term, postings in self._postings.items()}),
            field_lengths=MappingProxyType(
                {name: MappingProxyType(dict(lengths)) for name, lengths in self._field_lengths.items()}
            ),
            doc_order=tuple(self._doc_order),
        )

    def _index_field(self, doc_id: str, text_field: TextField, value: str | None) -> None:
        if not value:
            return
        tokens = self._analyzers[text_field.name](value)
        if not tokens:
            return
        self._field_lengths[text_field.name][doc_id] = len(tokens)
        # Counter preserves first-seen order, keeping postings deterministic.
        for term, frequency in Counter(token.text for token in tokens).items():
            self._postings[term].append(
                Posting(doc_id=doc_id, field=text_field.name, frequency=frequency, weight=text_field.boost)
            )
