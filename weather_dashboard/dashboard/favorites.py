"""Favorite cities and the theme preference, persisted in a KeyValueStore."""

import json
from typing import List

from weather_dashboard.config import settings
from weather_dashboard.dashboard.state import Theme
from weather_dashboard.kv_store import KeyValueStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="dashboard/favorites")

DUPLICATE_NOTICE = "This city is already in your favorites!"


class FavoritesStore:
    """Ordered city names, unique case-insensitively, stored as a JSON array."""

    def __init__(self, store: KeyValueStore, key: str | None = None) -> None:
        self.store = store
        self.key = key or settings.favorites_key

    def list(self) -> List[str]:
        """Return the stored favorites; missing or corrupt data reads as empty."""
        raw = self.store.get(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring corrupt favorites entry", extra={"key": self.key})
            return []
        if not isinstance(data, list):
            logger.warning("Ignoring non-list favorites entry", extra={"key": self.key})
            return []
        return [item for item in data if isinstance(item, str)]

    def _save(self, favorites: List[str]) -> None:
        self.store.set(self.key, json.dumps(favorites, ensure_ascii=False))

    def contains(self, city: str) -> bool:
        wanted = city.lower()
        return any(fav.lower() == wanted for fav in self.list())

    def add(self, city: str) -> bool:
        """Append `city`; returns False (and stores nothing) if it is already there."""
        favorites = self.list()
        if any(fav.lower() == city.lower() for fav in favorites):
            logger.info(f"{city!r} already in favorites")
            return False
        favorites.append(city)
        self._save(favorites)
        logger.info(f"Added {city!r} to favorites")
        return True

    def remove(self, city: str) -> None:
        """Drop every entry matching `city` case-insensitively."""
        wanted = city.lower()
        remaining = [fav for fav in self.list() if fav.lower() != wanted]
        self._save(remaining)


class ThemeStore:
    """Persisted "dark"/"light" choice, falling back to the system preference."""

    def __init__(self, store: KeyValueStore, key: str | None = None) -> None:
        self.store = store
        self.key = key or settings.theme_key

    def get(self, system_dark: bool = False) -> Theme:
        saved = self.store.get(self.key)
        if saved == Theme.DARK.value:
            return Theme.DARK
        if saved == Theme.LIGHT.value:
            return Theme.LIGHT
        return Theme.DARK if system_dark else Theme.LIGHT

    def toggle(self, system_dark: bool = False) -> Theme:
        new_theme = Theme.LIGHT if self.get(system_dark) is Theme.DARK else Theme.DARK
        self.store.set(self.key, new_theme.value)
        return new_theme
