import unittest

from weather_dashboard.kv_store import InMemoryKeyValueStore


class TestInMemoryKeyValueStore(unittest.TestCase):
    def test_set_get_delete_clear(self):
        store = InMemoryKeyValueStore()
        self.assertIsNone(store.get("missing"))

        store.set("a", "1")
        store.set("b", "2")
        store.set("a", "3")
        self.assertEqual(store.get("a"), "3")

        store.delete("a")
        store.delete("a")
        self.assertIsNone(store.get("a"))

        store.clear()
        self.assertIsNone(store.get("b"))


if __name__ == "__main__":
    unittest.main()
