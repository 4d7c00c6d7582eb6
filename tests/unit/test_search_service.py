"""Unit tests for the async search service."""

import pytest

from doc_index.domain.search import DocumentRecord
from doc_index.engine import NotInitializedError, SearchEngine
from doc_index.service_layer.search_service import SearchService


@pytest.mark.asyncio
async def test_build_then_search(engine: SearchEngine, fox_corpus: list[DocumentRecord]) -> None:
    service = SearchService(engine)

    result = await service.build_index(fox_corpus)
    hits = await service.search("fox", max_results=10, category="guides", min_score=0, offset=0)

    assert result.documents_indexed == 2
    assert [hit.doc_id for hit in hits] == ["b"]


@pytest.mark.asyncio
async def test_initialize_loads_snapshot(engine: SearchEngine, fox_corpus: list[DocumentRecord]) -> None:
    engine.build_index(fox_corpus)
    service = SearchService(SearchEngine(engine.store.path))

    assert await service.initialize() is True
    assert len(await service.search("fox", 10, None, 0, 0)) == 2


@pytest.mark.asyncio
async def test_search_propagates_not_initialized(engine: SearchEngine) -> None:
    service = SearchService(engine)

    with pytest.raises(NotInitializedError):
        await service.search("fox")


@pytest.mark.asyncio
async def test_build_reports_skipped_documents(engine: SearchEngine) -> None:
    service = SearchService(engine)

    result = await service.build_index([{"title": "missing id"}, DocumentRecord(id="ok", content="fine")])

    assert result.documents_skipped == 1
    assert result.documents_indexed == 1
