import os
import tempfile
import unittest

from timetable.config import Settings
from timetable.db import InMemoryStructuredStore, SqlStructuredStore, StoreError
from timetable.gateway import LocalBackend, RemoteBackend
from timetable.records import Collection
from timetable.selector import BackendMode, select_backend
from timetable.storage import InMemoryKeyValueStore


def _settings(**overrides) -> Settings:
    values = {"database_url": "postgresql://db.example/timetable", "database_key": "secret"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class SelectBackendTests(unittest.TestCase):
    def setUp(self):
        self.local = InMemoryKeyValueStore()

    def _factory(self, store):
        calls = []

        def factory(url, key):
            calls.append((url, key))
            return store

        factory.calls = calls
        return factory

    def test_unconfigured_is_local(self):
        factory = self._factory(InMemoryStructuredStore())
        for overrides in ({"database_url": None}, {"database_key": None}, {"database_url": ""}):
            selection = select_backend(_settings(**overrides), self.local, factory)
            self.assertIs(selection.mode, BackendMode.LOCAL)
            self.assertIsInstance(selection.backend, LocalBackend)
        self.assertEqual(factory.calls, [])

    def test_ready_when_every_probe_succeeds(self):
        store = InMemoryStructuredStore()
        factory = self._factory(store)
        selection = select_backend(_settings(), self.local, factory)
        self.assertIs(selection.mode, BackendMode.REMOTE_READY)
        self.assertIsInstance(selection.backend, RemoteBackend)
        self.assertIs(selection.backend.store, store)
        self.assertEqual(factory.calls, [("postgresql://db.example/timetable", "secret")])

    def test_any_missing_table_means_missing_schema(self):
        for missing in ({Collection.SCHEDULES}, {Collection.SERVER_LINKS}, set(Collection)):
            store = InMemoryStructuredStore(missing=missing)
            selection = select_backend(_settings(), self.local, self._factory(store))
            self.assertIs(selection.mode, BackendMode.REMOTE_MISSING_SCHEMA)
            self.assertIsInstance(selection.backend, LocalBackend)

    def test_other_probe_failure_falls_back_to_local(self):
        store = InMemoryStructuredStore()
        store.fail_reads = True
        selection = select_backend(_settings(), self.local, self._factory(store))
        self.assertIs(selection.mode, BackendMode.LOCAL)

    def test_missing_table_wins_over_other_failures(self):
        store = InMemoryStructuredStore(missing={Collection.SERVER_LINKS})
        store.fail_reads = True
        selection = select_backend(_settings(), self.local, self._factory(store))
        self.assertIs(selection.mode, BackendMode.REMOTE_MISSING_SCHEMA)

    def test_factory_failure_falls_back_to_local(self):
        def factory(url, key):
            raise StoreError("unreachable")

        selection = select_backend(_settings(), self.local, factory)
        self.assertIs(selection.mode, BackendMode.LOCAL)

    def test_sql_store_without_tables(self):
        with tempfile.TemporaryDirectory() as tmp:
            url = f"sqlite+pysqlite:///{os.path.join(tmp, 'timetable.db')}"
            selection = select_backend(_settings(database_url=url), self.local, SqlStructuredStore)
            self.assertIs(selection.mode, BackendMode.REMOTE_MISSING_SCHEMA)

            store = SqlStructuredStore(url)
            store.create_schema()
            store.engine.dispose()
            selection = select_backend(_settings(database_url=url), self.local, SqlStructuredStore)
            self.assertIs(selection.mode, BackendMode.REMOTE_READY)
            selection.backend.store.engine.dispose()


if __name__ == "__main__":
    unittest.main()
