"""Shared protocol for the local key-value stores backing favorites and preferences."""

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """A string-to-string store with browser-storage semantics."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if absent or unreadable."""

    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""

    def delete(self, key: str) -> None:
        """Remove `key` without raising if it is absent."""

    def clear(self) -> None:
        """Remove every key owned by this store."""
