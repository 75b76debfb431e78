import json
import tempfile
import unittest
from pathlib import Path

from weather_dashboard.kv_store import FileKeyValueStore


class TestFileKeyValueStore(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "nested" / "store.json"

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file_reads_as_empty(self):
        store = FileKeyValueStore(self.path)
        self.assertIsNone(store.get("theme"))

    def test_values_persist_across_instances(self):
        FileKeyValueStore(self.path).set("theme", "dark")

        reopened = FileKeyValueStore(self.path)
        self.assertEqual(reopened.get("theme"), "dark")
        self.assertEqual(json.loads(self.path.read_text(encoding="utf-8")), {"theme": "dark"})

    def test_delete_and_clear(self):
        store = FileKeyValueStore(self.path)
        store.set("a", "1")
        store.set("b", "2")

        store.delete("a")
        store.delete("missing")
        self.assertIsNone(store.get("a"))
        self.assertEqual(store.get("b"), "2")

        store.clear()
        self.assertIsNone(store.get("b"))

    def test_corrupt_file_reads_as_empty_and_is_replaced(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{broken", encoding="utf-8")
        store = FileKeyValueStore(self.path)

        self.assertIsNone(store.get("theme"))
        store.set("theme", "light")
        self.assertEqual(store.get("theme"), "light")

    def test_non_string_values_are_ignored(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text(json.dumps({"a": 1, "b": "ok"}), encoding="utf-8")
        store = FileKeyValueStore(self.path)

        self.assertIsNone(store.get("a"))
        self.assertEqual(store.get("b"), "ok")

    def test_no_temp_files_left_behind(self):
        store = FileKeyValueStore(self.path)
        store.set("a", "1")
        store.set("b", "2")
        self.assertEqual([p.name for p in self.path.parent.iterdir()], ["store.json"])


if __name__ == "__main__":
    unittest.main()
