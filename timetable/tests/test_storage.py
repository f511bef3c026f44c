import json
import os
import tempfile
import unittest

from timetable.storage import InMemoryKeyValueStore, JsonFileKeyValueStore


class JsonFileKeyValueStoreTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "nested", "store.json")
        self.store = JsonFileKeyValueStore(self.path)

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file_reads_as_empty(self):
        self.assertIsNone(self.store.get_item("trainSchedules"))

    def test_set_and_get(self):
        self.store.set_item("trainSchedules", "[]")
        self.store.set_item("serverLinks", '[{"name": "Łódź"}]')
        self.assertEqual(self.store.get_item("trainSchedules"), "[]")
        self.assertEqual(JsonFileKeyValueStore(self.path).get_item("serverLinks"), '[{"name": "Łódź"}]')

    def test_overwrite_keeps_other_slots(self):
        self.store.set_item("trainSchedules", "[]")
        self.store.set_item("serverLinks", "[]")
        self.store.set_item("trainSchedules", "[{}]")
        self.assertEqual(self.store.get_item("trainSchedules"), "[{}]")
        self.assertEqual(self.store.get_item("serverLinks"), "[]")

    def test_no_temporary_files_left_behind(self):
        self.store.set_item("trainSchedules", "[]")
        self.assertEqual(os.listdir(os.path.dirname(self.path)), ["store.json"])

    def test_rejects_non_object_document(self):
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump([1, 2, 3], f)
        with self.assertRaises(ValueError):
            self.store.get_item("trainSchedules")


class InMemoryKeyValueStoreTests(unittest.TestCase):
    def test_slots(self):
        store = InMemoryKeyValueStore()
        self.assertIsNone(store.get_item("serverLinks"))
        store.set_item("serverLinks", "[]")
        self.assertEqual(store.slots, {"serverLinks": "[]"})


if __name__ == "__main__":
    unittest.main()
