"""
Application context: the selected backend plus the in-memory collections.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Optional

from timetable.config import Settings
from timetable.db import SqlStructuredStore, StoreError
from timetable.gateway import PersistenceBackend
from timetable.records import (
    Collection,
    Record,
    Schedule,
    ServerLink,
    next_local_id,
    require_fields,
    utc_now,
)
from timetable.selector import BackendMode, StoreFactory, select_backend
from timetable.storage import JsonFileKeyValueStore, KeyValueStore

logger = logging.getLogger(__name__)


class StoreWriteError(Exception):
    """A create or delete could not be persisted to the active store."""

    def __init__(self, collection: Collection, action: str):
        super().__init__(f"{action} on {collection.value} failed")
        self.collection = collection
        self.action = action


class AppContext:
    """
    Holds the mode chosen at startup and a cache of both collections.

    The cache is refreshed after every successful mutation. Mutations are
    applied to the cache before the store write; a failed write triggers a
    reload from the active store before ``StoreWriteError`` is raised.
    """

    def __init__(
        self,
        settings: Settings,
        local_store: Optional[KeyValueStore] = None,
        store_factory: StoreFactory = SqlStructuredStore,
    ):
        self.settings = settings
        if local_store is None:
            local_store = JsonFileKeyValueStore(settings.local_store_path)
        self.local_store = local_store
        self._store_factory = store_factory
        self.mode: Optional[BackendMode] = None
        self.backend: Optional[PersistenceBackend] = None
        self._items: dict[Collection, list[Record]] = {c: [] for c in Collection}
        self._lock = threading.RLock()

    def initialize(self) -> BackendMode:
        """Run backend selection once and populate both collections."""
        with self._lock:
            if self.mode is not None:
                return self.mode
            selection = select_backend(self.settings, self.local_store, self._store_factory)
            self.mode = selection.mode
            self.backend = selection.backend
            for collection in Collection:
                self.load(collection)
            logger.info("Timetable context initialised in %s mode", self.mode.name)
            return self.mode

    def _require_backend(self) -> PersistenceBackend:
        if self.backend is None:
            raise RuntimeError("AppContext.initialize() has not been called")
        return self.backend

    def records(self, collection: Collection) -> list[Record]:
        with self._lock:
            return list(self._items[collection])

    @property
    def schedules(self) -> list[Schedule]:
        return self.records(Collection.SCHEDULES)

    @property
    def server_links(self) -> list[ServerLink]:
        return self.records(Collection.SERVER_LINKS)

    def get(self, collection: Collection, record_id: str) -> Optional[Record]:
        for record in self.records(collection):
            if record.id == record_id:
                return record
        return None

    def load(self, collection: Collection) -> list[Record]:
        backend = self._require_backend()
        try:
            records = backend.fetch(collection)
        except StoreError:
            logger.exception("Error loading %s", collection.value)
            return self.records(collection)
        with self._lock:
            self._items[collection] = list(records)
            return list(records)

    def create(self, collection: Collection, record: Record) -> Record:
        """Add a record; returns it as persisted (with any store-assigned id)."""
        require_fields(record)
        backend = self._require_backend()
        # The cache owns its own copy; neither the argument nor the result alias it.
        record = replace(record)
        with self._lock:
            current = self._items[collection]
            if not record.id:
                record.id = next_local_id(r.id for r in current)
            if record.created_at is None:
                record.created_at = utc_now()
            snapshot = [record, *current]
            self._items[collection] = snapshot
            try:
                persisted = backend.insert(collection, record, list(snapshot))
            except StoreError as exc:
                self._resync_after_failure(collection, "create", exc)
        if backend.reloads_after_write:
            self.load(collection)
        return replace(persisted)

    def delete(self, collection: Collection, record_id: str) -> bool:
        """Remove a record; returns whether it was present in the cache."""
        backend = self._require_backend()
        with self._lock:
            current = self._items[collection]
            snapshot = [r for r in current if r.id != record_id]
            found = len(snapshot) != len(current)
            self._items[collection] = snapshot
            try:
                backend.delete(collection, record_id, list(snapshot))
            except StoreError as exc:
                self._resync_after_failure(collection, "delete", exc)
        if backend.reloads_after_write:
            self.load(collection)
        return found

    def _resync_after_failure(
        self, collection: Collection, action: str, exc: StoreError
    ) -> None:
        logger.error("Error during %s on %s", action, collection.value, exc_info=exc)
        try:
            records = self._require_backend().fetch(collection)
        except StoreError:
            logger.warning(
                "Could not reload %s after a failed %s; cache keeps the requested change",
                collection.value,
                action,
            )
        else:
            self._items[collection] = list(records)
        raise StoreWriteError(collection, action) from exc
