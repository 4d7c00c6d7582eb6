"""Filesystem corpus loader for markdown documents.

Two ways to feed the indexer:

* ``load_documents_from_entries`` - explicit ``{id, title, path}`` entries, for
  callers that already know which files belong to the corpus.
* ``collect_documents`` - walks ``<docs_dir>/<category>/*.md`` and titles each
  file ``"<category>/<stem>"`` so category filters work on the result.

Both return lazy entries: file content is read only when the indexer asks for
it, and a read failure becomes ``DocumentUnreadableError`` at build time.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any

from doc_index.domain.search import CATEGORY_SEPARATOR, DocumentRecord
from doc_index.search.indexer import DocumentUnreadableError


logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


@dataclass(frozen=True)
class MarkdownEntry:
    """A markdown file whose content is read on ``load``."""

    id: str
    title: str
    path: Path

    def load(self) -> DocumentRecord:
        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Failed to read {self.path}: {exc}"
            raise DocumentUnreadableError(msg) from exc
        return DocumentRecord(id=self.id, title=self.title, content=content)


def load_documents_from_entries(entries: Iterable[Mapping[str, Any]]) -> list[MarkdownEntry]:
    """Turn ``{id?, title, path}`` mappings into lazy entries, keeping order.

    The id defaults to the path string.
    """

    documents: list[MarkdownEntry] = []
    for entry in entries:
        path = Path(entry["path"])
        documents.append(
            MarkdownEntry(
                id=str(entry.get("id") or path),
                title=str(entry.get("title") or path.stem),
                path=path,
            )
        )
    return documents


def collect_documents(docs_dir: str | Path) -> list[MarkdownEntry]:
    """Discover ``<category>/*.md`` files one level below ``docs_dir``."""

    return list(_iter_category_documents(Path(docs_dir)))


def _iter_category_documents(docs_dir: Path) -> Iterator[MarkdownEntry]:
    if not docs_dir.is_dir():
        logger.warning("Docs directory missing: %s", docs_dir)
        return

    for category_dir in sorted(p for p in docs_dir.iterdir() if p.is_dir()):
        if category_dir.name.startswith("."):
            continue
        for markdown_path in sorted(category_dir.glob(f"*{MARKDOWN_SUFFIX}")):
            if not markdown_path.is_file():
                continue
            yield MarkdownEntry(
                id=str(markdown_path),
                title=f"{category_dir.name}{CATEGORY_SEPARATOR}{markdown_path.stem}",
                path=markdown_path,
            )
