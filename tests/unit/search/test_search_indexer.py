"""Unit tests for generation builds."""

from dataclasses import dataclass

import pytest

from doc_index.domain.search import DocumentRecord
from doc_index.search.generation import Generation, IndexCorruptionError
from doc_index.search.indexer import DocumentUnreadableError, Indexer
from doc_index.search.schema import create_default_schema


@dataclass
class BrokenEntry:
    path: str

    def load(self) -> DocumentRecord:
        raise DocumentUnreadableError(f"Failed to read {self.path}")


class DeniedEntry:
    def load(self) -> DocumentRecord:
        raise OSError("permission denied")


@dataclass
class LazyEntry:
    record: DocumentRecord

    def load(self) -> DocumentRecord:
        return self.record


@pytest.fixture
def indexer() -> Indexer:
    return Indexer(create_default_schema())


def test_build_indexes_every_source_type(indexer: Indexer) -> None:
    generation, result = indexer.build(
        [
            DocumentRecord(id="a", content="alpha"),
            {"id": "b", "title": "Beta", "content": "beta"},
            LazyEntry(DocumentRecord(id="c", content="gamma")),
        ]
    )

    assert result.documents_indexed == 3
    assert result.documents_skipped == 0
    assert result.generation_id == generation.generation_id
    assert list(generation.doc_store) == ["a", "b", "c"]
    assert generation.index.doc_order == ("a", "b", "c")


def test_last_duplicate_wins_and_takes_later_position(indexer: Indexer) -> None:
    generation, result = indexer.build(
        [
            DocumentRecord(id="a", content="first"),
            DocumentRecord(id="b", content="middle"),
            DocumentRecord(id="a", content="second"),
        ]
    )

    assert result.duplicates_replaced == 1
    assert generation.resolve("a").content == "second"
    assert generation.index.doc_order == ("b", "a")
    assert generation.index.get_postings("first") == ()


def test_unreadable_and_invalid_sources_are_skipped(indexer: Indexer) -> None:
    generation, result = indexer.build(
        [
            BrokenEntry("missing.md"),
            {"id": "", "content": "no id"},
            {"title": "no id at all"},
            42,
            DocumentRecord(id="ok", content="fine"),
        ]
    )

    assert result.documents_indexed == 1
    assert result.documents_skipped == 4
    assert result.errors[0].startswith("#0: Failed to read missing.md")
    assert result.errors[3].startswith("#3: Unsupported document source type")
    assert list(generation.doc_store) == ["ok"]


def test_lazy_source_os_error_is_skipped(indexer: Indexer) -> None:
    generation, result = indexer.build([DocumentRecord(id="a", content="alpha"), DeniedEntry()])

    assert result.documents_indexed == 1
    assert result.documents_skipped == 1
    assert result.errors == ("#1: permission denied",)
    assert list(generation.doc_store) == ["a"]


def test_empty_corpus_builds_empty_generation(indexer: Indexer) -> None:
    generation, result = indexer.build([])

    assert generation.doc_count == 0
    assert result.documents_indexed == 0
    assert result.persisted is False


def test_every_indexed_id_resolves(indexer: Indexer) -> None:
    generation, _ = indexer.build([DocumentRecord(id=str(i), content=f"word{i} shared") for i in range(5)])

    assert generation.missing_doc_ids() == set()
    for doc_id in generation.index.doc_order:
        assert generation.resolve(doc_id).id == doc_id


def test_resolve_missing_document_raises() -> None:
    generation = Generation.empty(create_default_schema())

    with pytest.raises(IndexCorruptionError, match="missing"):
        generation.resolve("ghost")


def test_doc_store_is_read_only(indexer: Indexer) -> None:
    generation, _ = indexer.build([DocumentRecord(id="a", content="alpha")])

    with pytest.raises(TypeError):
        generation.doc_store["b"] = DocumentRecord(id="b")  # type: ignore[index]
