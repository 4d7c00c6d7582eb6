"""Unit tests for BM25 scoring over the inverted index."""

import pytest

from doc_index.domain.search import DocumentRecord
from doc_index.search.bm25_engine import BM25SearchEngine
from doc_index.search.inverted_index import IndexWriter, InvertedIndex
from doc_index.search.schema import create_default_schema


def _index(*records: DocumentRecord) -> InvertedIndex:
    writer = IndexWriter(create_default_schema())
    for record in records:
        writer.add_document(record)
    return writer.build()


def _ranked_ids(index: InvertedIndex, query: str) -> list[str]:
    engine = BM25SearchEngine()
    return [hit.doc_id for hit in engine.score(index, engine.tokenize_query(index, query))]


class TestTokenizeQuery:
    def test_blank_query_is_empty(self) -> None:
        index = _index(DocumentRecord(id="a", content="fox"))

        assert BM25SearchEngine().tokenize_query(index, "   ").is_empty()

    def test_stopword_only_query_is_empty(self) -> None:
        index = _index(DocumentRecord(id="a", content="fox"))

        assert BM25SearchEngine().tokenize_query(index, "the and of").is_empty()

    def test_terms_are_deduplicated_in_order(self) -> None:
        index = _index(DocumentRecord(id="a", content="fox"))

        tokens = BM25SearchEngine().tokenize_query(index, "Fox trap fox")

        assert tokens.ordered_terms == ("fox", "trap")
        assert tokens.per_field["content"] == ("fox", "trap")


class TestScore:
    def test_title_match_outranks_body_match(self) -> None:
        index = _index(
            DocumentRecord(id="body", title="Notes", content="deploy the service"),
            DocumentRecord(id="title", title="Deploy", content="notes about the service"),
        )

        assert _ranked_ids(index, "deploy") == ["title", "body"]

    def test_ties_keep_insertion_order(self) -> None:
        index = _index(
            DocumentRecord(id="z", content="alpha beta"),
            DocumentRecord(id="m", content="alpha gamma"),
            DocumentRecord(id="a", content="alpha delta"),
        )

        assert _ranked_ids(index, "alpha") == ["z", "m", "a"]

    def test_higher_frequency_ranks_first(self) -> None:
        index = _index(
            DocumentRecord(id="once", content="cache miss other words"),
            DocumentRecord(id="twice", content="cache cache other words"),
        )

        assert _ranked_ids(index, "cache") == ["twice", "once"]

    def test_unmatched_query_returns_nothing(self) -> None:
        index = _index(DocumentRecord(id="a", content="quick brown fox"))

        assert _ranked_ids(index, "zzz-nonexistent") == []

    def test_scores_are_positive(self) -> None:
        index = _index(DocumentRecord(id="a", content="fox"), DocumentRecord(id="b", content="fox"))
        engine = BM25SearchEngine()

        hits = engine.score(index, engine.tokenize_query(index, "fox"))

        assert all(hit.score > 0 for hit in hits)
        assert hits[0].score == pytest.approx(hits[1].score)

    def test_empty_index_returns_nothing(self) -> None:
        index = InvertedIndex.empty(create_default_schema())

        assert _ranked_ids(index, "fox") == []

    def test_stemmed_forms_match(self) -> None:
        index = _index(DocumentRecord(id="a", content="Indexing large corpora"))

        assert _ranked_ids(index, "indexed") == ["a"]
