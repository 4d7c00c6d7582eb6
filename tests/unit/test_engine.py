"""Unit tests for the search engine handle."""

from pathlib import Path

import pytest

from doc_index.config import Settings
from doc_index.domain.search import DocumentRecord
from doc_index.engine import NotInitializedError, SearchEngine
from doc_index.search.storage import PersistenceWriteError


@pytest.fixture
def built_engine(engine: SearchEngine, fox_corpus: list[DocumentRecord]) -> SearchEngine:
    engine.build_index(fox_corpus)
    return engine


class TestFoxCorpus:
    def test_fox_matches_both_documents_with_highlights(self, built_engine: SearchEngine) -> None:
        results = built_engine.search("fox", 10, None, 0, 0)

        assert [r.doc_id for r in results] == ["a", "b"]
        assert all("**fox**" in r.excerpt for r in results)
        assert results[0].title == "Intro"
        assert results[0].excerpt == "The quick brown **fox**"

    def test_category_filter(self, built_engine: SearchEngine) -> None:
        results = built_engine.search("fox", 10, "guides", 0, 0)

        assert [r.doc_id for r in results] == ["b"]

    def test_unmatched_query_is_empty_not_error(self, built_engine: SearchEngine) -> None:
        assert built_engine.search("zzz-nonexistent", 5, None, 0.2, 0) == []

    def test_blank_query_is_empty(self, built_engine: SearchEngine) -> None:
        assert built_engine.search("   ", 5, None, 0, 0) == []


class TestQueryOptions:
    @pytest.fixture
    def ranked_engine(self, engine: SearchEngine) -> SearchEngine:
        engine.build_index(
            [DocumentRecord(id=f"doc{i}", title=f"cat{i % 2}/page{i}", content="shared " * (i + 1)) for i in range(6)]
        )
        return engine

    def test_scores_are_non_increasing(self, ranked_engine: SearchEngine) -> None:
        scores = [r.score for r in ranked_engine.search("shared", 10, None, 0, 0)]

        assert len(scores) == 6
        assert scores == sorted(scores, reverse=True)

    def test_pages_concatenate_to_full_result(self, ranked_engine: SearchEngine) -> None:
        full = [r.doc_id for r in ranked_engine.search("shared", 10, None, 0, 0)]
        pages = [r.doc_id for offset in (0, 2, 4) for r in ranked_engine.search("shared", 2, None, 0, offset)]

        assert pages == full

    def test_offset_past_end_is_empty(self, ranked_engine: SearchEngine) -> None:
        assert ranked_engine.search("shared", 5, None, 0, 100) == []

    def test_zero_max_results(self, ranked_engine: SearchEngine) -> None:
        assert ranked_engine.search("shared", 0, None, 0, 0) == []

    def test_min_score_floor(self, ranked_engine: SearchEngine) -> None:
        scores = [r.score for r in ranked_engine.search("shared", 10, None, 0, 0)]
        floor = scores[2]

        results = ranked_engine.search("shared", 10, None, floor, 0)

        assert len(results) >= 3
        assert all(r.score >= floor for r in results)

    def test_category_applies_before_pagination(self, ranked_engine: SearchEngine) -> None:
        results = ranked_engine.search("shared", 10, "cat1", 0, 1)

        assert len(results) == 2
        assert all(r.title.startswith("cat1/") for r in results)

    def test_empty_category_is_no_filter(self, ranked_engine: SearchEngine) -> None:
        assert len(ranked_engine.search("shared", 10, "", 0, 0)) == 6

    def test_category_prefix_needs_separator(self, ranked_engine: SearchEngine) -> None:
        assert ranked_engine.search("shared", 10, "cat", 0, 0) == []

    def test_defaults_apply_when_arguments_omitted(self, ranked_engine: SearchEngine) -> None:
        results = ranked_engine.search("shared")

        assert len(results) <= ranked_engine.default_max_results
        assert all(r.score >= ranked_engine.default_min_score for r in results)

    @pytest.mark.parametrize(("max_results", "offset"), [(-1, 0), (1, -1)])
    def test_negative_paging_rejected(self, ranked_engine: SearchEngine, max_results: int, offset: int) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            ranked_engine.search("shared", max_results, None, 0, offset)


class TestLifecycle:
    def test_search_before_build_raises(self, engine: SearchEngine) -> None:
        with pytest.raises(NotInitializedError):
            engine.search("fox")

    def test_save_before_build_raises(self, engine: SearchEngine) -> None:
        with pytest.raises(NotInitializedError):
            engine.save()

    def test_build_persists_snapshot(self, engine: SearchEngine, fox_corpus: list[DocumentRecord]) -> None:
        result = engine.build_index(fox_corpus)

        assert result.persisted is True
        assert result.documents_indexed == 2
        assert engine.store.exists()
        assert engine.document_count == 2

    def test_empty_corpus_build_is_initialized(self, engine: SearchEngine) -> None:
        engine.build_index([])

        assert engine.is_initialized
        assert engine.search("fox", 5, None, 0, 0) == []

    def test_rebuild_replaces_previous_corpus(self, built_engine: SearchEngine) -> None:
        built_engine.build_index([DocumentRecord(id="c", title="Other", content="a fox den")])

        assert [r.doc_id for r in built_engine.search("fox", 10, None, 0, 0)] == ["c"]
        assert built_engine.document_count == 1

    def test_initialize_without_snapshot(self, engine: SearchEngine) -> None:
        assert engine.initialize() is False
        assert engine.is_initialized is False

    def test_initialize_with_corrupt_snapshot(self, engine: SearchEngine) -> None:
        engine.store.path.parent.mkdir(parents=True)
        engine.store.path.write_text("garbage")

        assert engine.initialize() is False
        with pytest.raises(NotInitializedError):
            engine.search("fox")

    def test_initialize_restores_persisted_generation(self, built_engine: SearchEngine) -> None:
        fresh = SearchEngine(built_engine.store.path)

        assert fresh.initialize() is True
        assert fresh.search("fox", 10, None, 0, 0) == built_engine.search("fox", 10, None, 0, 0)

    def test_save_failure_keeps_new_generation_active(
        self, engine: SearchEngine, fox_corpus: list[DocumentRecord], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def fail_save(generation):
            raise PersistenceWriteError("disk full")

        monkeypatch.setattr(engine.store, "save", fail_save)

        result = engine.build_index(fox_corpus)

        assert result.persisted is False
        assert engine.save() is False
        assert [r.doc_id for r in engine.search("fox", 10, None, 0, 0)] == ["a", "b"]


def test_from_settings_wires_configuration(tmp_path: Path) -> None:
    settings = Settings(docs_dir=tmp_path, default_max_results=7, highlight_marker="__", title_boost=4.0)

    engine = SearchEngine.from_settings(settings)

    assert engine.store.path == tmp_path / "search-index.json"
    assert engine.default_max_results == 7
    assert engine.highlight_marker == "__"
    assert engine.schema.get_boost("title") == 4.0
