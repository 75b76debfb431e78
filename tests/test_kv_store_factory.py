import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import redis

from weather_dashboard.config import Settings
from weather_dashboard.kv_store import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    RedisKeyValueStore,
    build_kv_store,
)


class _PingingRedis:
    def ping(self):
        return True


class TestBuildKvStore(unittest.TestCase):
    def test_memory_backend(self):
        store = build_kv_store(Settings(store_backend="memory"))
        self.assertIsInstance(store, InMemoryKeyValueStore)

    def test_file_backend(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = str(Path(tmp) / "kv.json")
            store = build_kv_store(Settings(store_backend="FILE", store_file_path=path))
            self.assertIsInstance(store, FileKeyValueStore)
            self.assertEqual(str(store.path), path)

    def test_redis_backend(self):
        settings = Settings(store_backend="redis", store_redis_url="redis://localhost:6379/0", store_redis_prefix="t:")
        with patch("weather_dashboard.kv_store.factory.redis.Redis.from_url", return_value=_PingingRedis()):
            store = build_kv_store(settings)
        self.assertIsInstance(store, RedisKeyValueStore)
        self.assertEqual(store.prefix, "t:")

    def test_unreachable_redis_falls_back_to_memory(self):
        settings = Settings(store_backend="redis", store_redis_url="redis://localhost:1/0")
        with patch(
            "weather_dashboard.kv_store.factory.redis.Redis.from_url",
            side_effect=redis.ConnectionError("refused"),
        ):
            store = build_kv_store(settings)
        self.assertIsInstance(store, InMemoryKeyValueStore)

    def test_redis_requires_url(self):
        with self.assertRaises(ValueError):
            build_kv_store(Settings(store_backend="redis", store_redis_url=None))

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            build_kv_store(Settings(store_backend="sqlite"))


if __name__ == "__main__":
    unittest.main()
