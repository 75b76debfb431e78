"""Redis-backed key-value store, for dashboards sharing favorites across hosts."""

from typing import Optional

from weather_dashboard.kv_store.base import KeyValueStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="kv_store/redis")


class RedisKeyValueStore(KeyValueStore):
    """Store string values under a key prefix; Redis errors read as missing data."""

    def __init__(self, client, prefix: str = "weather_dashboard:") -> None:
        logger.debug("Initializing RedisKeyValueStore")
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            raw = self.client.get(self._key(key))
        except Exception as exc:  # pragma: no cover
            logger.error("Failed to read key from Redis: %s", exc)
            return None
        if raw is None:
            return None
        if isinstance(raw, bytes):
            try:
                return raw.decode("utf-8")
            except UnicodeDecodeError:
                logger.error("Undecodable value stored under %s", self._key(key))
                return None
        return str(raw)

    def set(self, key: str, value: str) -> None:
        try:
            self.client.set(self._key(key), value.encode("utf-8"))
        except Exception as exc:  # pragma: no cover
            logger.error("Failed to write key to Redis: %s", exc)
            raise

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except Exception as exc:  # pragma: no cover
            logger.error("Failed to delete key from Redis: %s", exc)

    def clear(self) -> None:
        """Best-effort removal of every key under the configured prefix."""
        try:
            for key in self.client.scan_iter(f"{self.prefix}*"):
                self.client.delete(key)
        except Exception as exc:  # pragma: no cover
            logger.error("Failed to clear keys from Redis: %s", exc)
