"""Interfaces and helpers for weather providers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Protocol

from weather_dashboard.models import CitySearchResult, WeatherSnapshot


class WeatherProvider(Protocol):
    """Anything that can answer the three proxy operations."""

    def fetch_current_weather(self, city: str) -> WeatherSnapshot:
        """Return current conditions for a city."""
        ...

    def fetch_forecast(self, city: str) -> Dict[str, Any]:
        """Return `{city, country, list, timezone}` with provider-native list entries."""
        ...

    def search_city(self, query: str) -> CitySearchResult:
        """Resolve a search term to a single city."""
        ...


@dataclass
class CallableWeatherProvider(WeatherProvider):
    """Wrap three callables so tests and alternate backends can swap them in."""

    current: Callable[[str], WeatherSnapshot]
    forecast: Callable[[str], Dict[str, Any]]
    search: Callable[[str], CitySearchResult]

    def fetch_current_weather(self, city: str) -> WeatherSnapshot:
        return self.current(city)

    def fetch_forecast(self, city: str) -> Dict[str, Any]:
        return self.forecast(city)

    def search_city(self, query: str) -> CitySearchResult:
        return self.search(query)


def default_provider() -> WeatherProvider:
    """OpenWeatherMap-backed provider using the module-level HTTP session."""
    from weather_dashboard.providers import openweather_client

    return CallableWeatherProvider(
        current=openweather_client.fetch_current_weather,
        forecast=openweather_client.fetch_forecast,
        search=openweather_client.search_city,
    )
