"""Pick the key-value store backend at startup."""

import redis

from weather_dashboard import config
from weather_dashboard.kv_store.base import KeyValueStore
from weather_dashboard.kv_store.file import FileKeyValueStore
from weather_dashboard.kv_store.memory import InMemoryKeyValueStore
from weather_dashboard.kv_store.redis import RedisKeyValueStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="kv_store/factory")

DEFAULT_BACKEND = "file"


def build_kv_store(settings: config.Settings | None = None) -> KeyValueStore:
    """Instantiate the configured store; an unreachable Redis degrades to memory."""
    settings = settings or config.settings
    backend = (settings.store_backend or DEFAULT_BACKEND).lower()

    if backend == "memory":
        logger.info("Using in-memory key-value store")
        return InMemoryKeyValueStore()

    if backend == "file":
        logger.info(f"Using file key-value store at {settings.store_file_path}")
        return FileKeyValueStore(settings.store_file_path)

    if backend == "redis":
        if not settings.store_redis_url:
            raise ValueError("store_redis_url must be set for the redis backend")
        try:
            client = redis.Redis.from_url(settings.store_redis_url)
            client.ping()
            logger.info("Using Redis key-value store", extra={"prefix": settings.store_redis_prefix})
            return RedisKeyValueStore(client, prefix=settings.store_redis_prefix)
        except redis.RedisError as exc:
            logger.warning("Falling back to in-memory store (Redis unavailable)", extra={"error": str(exc)})
            return InMemoryKeyValueStore()

    raise ValueError(f"Unknown key-value store backend '{backend}'")
