"""Shared test fixtures and configuration."""

from pathlib import Path

import pytest

from doc_index.domain.search import DocumentRecord
from doc_index.engine import SearchEngine


# Settings reads these from the environment; tests must not inherit a developer's shell.
_SETTINGS_ENV_VARS = (
    "DOCS_DIR",
    "INDEX_FILENAME",
    "DEFAULT_MAX_RESULTS",
    "DEFAULT_MIN_SCORE",
    "EXCERPT_CONTEXT_CHARS",
    "HIGHLIGHT_MARKER",
    "TITLE_BOOST",
    "BODY_BOOST",
    "BM25_K1",
    "BM25_B",
    "LOG_LEVEL",
    "LOG_JSON",
)


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the working directory out of Settings.
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def fox_corpus() -> list[DocumentRecord]:
    return [
        DocumentRecord(id="a", title="Intro", content="The quick brown fox"),
        DocumentRecord(id="b", title="guides/setup", content="Setup the fox trap"),
    ]


@pytest.fixture
def engine(tmp_path: Path) -> SearchEngine:
    return SearchEngine(tmp_path / "index" / "search-index.json")
