"""
Startup classification of which store backs the session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from timetable.config import Settings
from timetable.db import MissingCollectionError, SqlStructuredStore, StoreError, StructuredStore
from timetable.gateway import LocalBackend, PersistenceBackend, RemoteBackend
from timetable.records import Collection
from timetable.storage import KeyValueStore

logger = logging.getLogger(__name__)

StoreFactory = Callable[[str, Optional[str]], StructuredStore]


class BackendMode(str, Enum):
    LOCAL = "local"
    REMOTE_READY = "ready"
    REMOTE_MISSING_SCHEMA = "missing"


@dataclass(frozen=True)
class Selection:
    mode: BackendMode
    backend: PersistenceBackend


def select_backend(
    settings: Settings,
    local_store: KeyValueStore,
    store_factory: StoreFactory = SqlStructuredStore,
) -> Selection:
    """
    Probe the structured store, if configured, and pick a backend.

    Every collection is probed with a one-row read. A missing table anywhere
    wins over any other failure; any other failure falls back to local
    storage and is only logged.
    """
    local = Selection(BackendMode.LOCAL, LocalBackend(local_store))
    if not settings.structured_store_configured:
        logger.info("No structured store configured; using local storage")
        return local

    try:
        store = store_factory(settings.database_url, settings.database_key)
    except StoreError:
        logger.exception("Cannot connect to the structured store; using local storage")
        return local

    missing_schema = False
    failure: Optional[StoreError] = None
    for collection in Collection:
        try:
            store.probe(collection)
        except MissingCollectionError as exc:
            logger.warning("Structured store is missing a table: %s", exc)
            missing_schema = True
        except StoreError as exc:
            failure = failure or exc

    if missing_schema:
        return Selection(BackendMode.REMOTE_MISSING_SCHEMA, LocalBackend(local_store))
    if failure is not None:
        logger.error("Structured store probe failed; using local storage", exc_info=failure)
        return local

    logger.info("Structured store ready")
    return Selection(BackendMode.REMOTE_READY, RemoteBackend(store))
