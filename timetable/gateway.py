"""
Persistence backends behind the application context.

Both implementations honour the same contract: ``fetch`` returns the full
collection, most recent first; ``insert`` and ``delete`` persist a mutation the
context has already applied to its in-memory ``snapshot``.
"""

from __future__ import annotations

import json
import logging
from typing import Protocol

from timetable.db import StoreError, StructuredStore
from timetable.records import Collection, Record, newest_first
from timetable.storage import KeyValueStore

logger = logging.getLogger(__name__)


class PersistenceBackend(Protocol):
    """Uniform persistence interface selected once at startup."""

    # Whether the context must reload the collection after a successful write
    # to pick up store-assigned identifiers.
    reloads_after_write: bool

    def fetch(self, collection: Collection) -> list[Record]:
        ...

    def insert(
        self, collection: Collection, record: Record, snapshot: list[Record]
    ) -> Record:
        ...

    def delete(
        self, collection: Collection, record_id: str, snapshot: list[Record]
    ) -> None:
        ...


class LocalBackend:
    """Rewrites the whole collection into its local key-value slot on every write."""

    reloads_after_write = False

    def __init__(self, store: KeyValueStore):
        self.store = store

    def fetch(self, collection: Collection) -> list[Record]:
        try:
            raw = self.store.get_item(collection.storage_key)
        except (OSError, ValueError) as exc:
            raise StoreError(f"cannot read local slot {collection.storage_key}") from exc
        if raw is None:
            return []
        try:
            items = json.loads(raw)
            records = [collection.record_type.from_dict(item) for item in items]
        except (ValueError, TypeError, AttributeError) as exc:
            raise StoreError(
                f"local slot {collection.storage_key} is not a valid collection"
            ) from exc
        return newest_first(records)

    def _write(self, collection: Collection, snapshot: list[Record]) -> None:
        payload = json.dumps([r.as_dict() for r in snapshot], ensure_ascii=False)
        try:
            self.store.set_item(collection.storage_key, payload)
        except (OSError, ValueError) as exc:
            raise StoreError(f"cannot write local slot {collection.storage_key}") from exc
        logger.debug("Wrote %d records to %s", len(snapshot), collection.storage_key)

    def insert(
        self, collection: Collection, record: Record, snapshot: list[Record]
    ) -> Record:
        self._write(collection, snapshot)
        return record

    def delete(
        self, collection: Collection, record_id: str, snapshot: list[Record]
    ) -> None:
        self._write(collection, snapshot)


class RemoteBackend:
    """Delegates to the structured store, which assigns identifiers."""

    reloads_after_write = True

    def __init__(self, store: StructuredStore):
        self.store = store

    def fetch(self, collection: Collection) -> list[Record]:
        return self.store.fetch_all(collection)

    def insert(
        self, collection: Collection, record: Record, snapshot: list[Record]
    ) -> Record:
        return self.store.insert(collection, record)

    def delete(
        self, collection: Collection, record_id: str, snapshot: list[Record]
    ) -> None:
        self.store.delete(collection, record_id)
