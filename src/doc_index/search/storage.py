"""Snapshot persistence for index generations.

A generation is written as one minified JSON document::

    {
      "version": "doc-index/1",
      "createdAt": "...",
      "generationId": "...",
      "index": <InvertedIndex.to_dict() blob>,
      "docStore": {"<id>": {"id": ..., "title": ..., "content": ...}}
    }

Writes go to a temp file beside the snapshot and are moved into place with
``Path.replace`` so readers never observe a half-written file.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
import logging
from pathlib import Path
from typing import Any

import orjson
from pydantic import ValidationError

from doc_index.domain.search import DocumentRecord
from doc_index.search.generation import Generation
from doc_index.search.inverted_index import InvertedIndex


logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "doc-index/1"
DEFAULT_SNAPSHOT_FILENAME = "search-index.json"


class StorageError(ValueError):
    """Base class for snapshot persistence failures."""


class PersistenceWriteError(StorageError):
    """Raised when a snapshot cannot be written to disk."""


class PersistenceCorruptError(StorageError):
    """Raised when a snapshot exists but cannot be turned back into a generation."""


class SnapshotStore:
    """Persist a single generation snapshot at a fixed path."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, generation: Generation) -> Path:
        """Atomically overwrite the snapshot with ``generation``."""

        payload = {
            "version": SNAPSHOT_VERSION,
            "createdAt": generation.created_at.isoformat(),
            "generationId": generation.generation_id,
            "index": generation.index.to_dict(),
            "docStore": {doc_id: record.model_dump() for doc_id, record in generation.doc_store.items()},
        }
        try:
            self._atomic_write_bytes(orjson.dumps(payload))
        except (OSError, TypeError) as exc:
            msg = f"Failed to write snapshot {self.path}: {exc}"
            raise PersistenceWriteError(msg) from exc
        logger.debug("Saved generation %s to %s", generation.generation_id, self.path)
        return self.path

    def load(self) -> Generation | None:
        """Return the stored generation, ``None`` when no snapshot exists."""

        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            msg = f"Failed to read snapshot {self.path}: {exc}"
            raise PersistenceCorruptError(msg) from exc

        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            msg = f"Snapshot {self.path} is not valid JSON: {exc}"
            raise PersistenceCorruptError(msg) from exc

        return self._generation_from_payload(payload)

    def _generation_from_payload(self, payload: Any) -> Generation:
        if not isinstance(payload, Mapping):
            raise PersistenceCorruptError(f"Snapshot {self.path} must contain a JSON object")

        version = payload.get("version")
        if version != SNAPSHOT_VERSION:
            logger.warning(
                "Snapshot %s has version %r (expected %r); loading anyway",
                self.path,
                version,
                SNAPSHOT_VERSION,
            )

        try:
            index = InvertedIndex.from_dict(payload["index"])
            doc_store = _doc_store_from_payload(payload["docStore"])
            created_raw = payload.get("createdAt")
            created_at = (
                datetime.fromisoformat(created_raw) if isinstance(created_raw, str) else datetime.now(timezone.utc)
            )
            generation = Generation(
                index=index,
                doc_store=doc_store,
                generation_id=str(payload.get("generationId") or "restored"),
                created_at=created_at,
            )
        except (KeyError, TypeError, ValueError) as exc:
            msg = f"Snapshot {self.path} is malformed: {exc!r}"
            raise PersistenceCorruptError(msg) from exc

        missing = generation.missing_doc_ids()
        if missing:
            msg = f"Snapshot {self.path} indexes {len(missing)} document(s) missing from its store"
            raise PersistenceCorruptError(msg)
        return generation

    def _atomic_write_bytes(self, serialized: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_bytes(serialized)
            tmp_path.replace(self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise


def _doc_store_from_payload(raw: Any) -> dict[str, DocumentRecord]:
    if not isinstance(raw, Mapping):
        raise TypeError("docStore must be a mapping")
    doc_store: dict[str, DocumentRecord] = {}
    for doc_id, entry in raw.items():
        try:
            record = DocumentRecord.model_validate(entry)
        except ValidationError as exc:
            msg = f"Invalid docStore entry for {doc_id!r}: {exc.error_count()} error(s)"
            raise ValueError(msg) from exc
        if record.id != doc_id:
            msg = f"docStore key {doc_id!r} does not match record id {record.id!r}"
            raise ValueError(msg)
        doc_store[doc_id] = record
    return doc_store
