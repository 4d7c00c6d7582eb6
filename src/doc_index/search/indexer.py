"""Build index generations from an ordered corpus.

The indexer turns whatever the corpus loader supplies into one fresh
``Generation``. It never mutates a previous generation: every call starts from
an empty writer, so two builds of the same corpus are interchangeable.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import logging
from typing import Any, Protocol, runtime_checkable

from doc_index.domain.search import DocumentRecord
from doc_index.search.generation import Generation
from doc_index.search.inverted_index import IndexWriter
from doc_index.search.schema import Schema


logger = logging.getLogger(__name__)


class DocumentUnreadableError(ValueError):
    """Raised when a source document's content cannot be read."""


@runtime_checkable
class LazyDocument(Protocol):
    """A corpus entry whose content is read only when the indexer asks for it."""

    def load(self) -> DocumentRecord:  # pragma: no cover - interface definition
        ...


DocumentSource = DocumentRecord | Mapping[str, Any] | LazyDocument


@dataclass(frozen=True)
class IndexBuildResult:
    """Outcome of one full rebuild."""

    documents_indexed: int
    documents_skipped: int
    duplicates_replaced: int
    errors: tuple[str, ...]
    generation_id: str
    persisted: bool = False


class Indexer:
    """Turn an ordered corpus into a new generation."""

    def __init__(self, schema: Schema) -> None:
        self.schema = schema

    def build(self, documents: Iterable[DocumentSource]) -> tuple[Generation, IndexBuildResult]:
        """Index ``documents`` in order; the last record for a given id wins."""

        records: dict[str, DocumentRecord] = {}
        errors: list[str] = []
        documents_skipped = 0
        duplicates_replaced = 0

        for position, source in enumerate(documents):
            try:
                record = _resolve_record(source)
            except ValueError as exc:
                logger.warning("Skipping document #%d: %s", position, exc)
                errors.append(f"#{position}: {exc}")
                documents_skipped += 1
                continue

            if record.id in records:
                # Re-insert so the survivor also takes the later position.
                del records[record.id]
                duplicates_replaced += 1
                logger.debug("Document %s replaced by a later duplicate", record.id)
            records[record.id] = record

        writer = IndexWriter(self.schema)
        for record in records.values():
            writer.add_document(record)

        generation = Generation(index=writer.build(), doc_store=records)
        result = IndexBuildResult(
            documents_indexed=len(records),
            documents_skipped=documents_skipped,
            duplicates_replaced=duplicates_replaced,
            errors=tuple(errors),
            generation_id=generation.generation_id,
        )
        logger.info(
            "Built generation %s: %d indexed, %d skipped, %d duplicates replaced",
            generation.generation_id,
            result.documents_indexed,
            result.documents_skipped,
            result.duplicates_replaced,
        )
        return generation, result


def _resolve_record(source: DocumentSource) -> DocumentRecord:
    if isinstance(source, DocumentRecord):
        return source
    if isinstance(source, Mapping):
        return DocumentRecord.model_validate(dict(source))
    if isinstance(source, LazyDocument):
        try:
            return source.load()
        except OSError as exc:
            raise DocumentUnreadableError(str(exc)) from exc
    msg = f"Unsupported document source type: {type(source).__name__}"
    raise DocumentUnreadableError(msg)
