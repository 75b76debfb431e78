"""Weather provider backends."""

from .base import CallableWeatherProvider, WeatherProvider, default_provider
from .openweather_client import fetch_current_weather, fetch_forecast, search_city

__all__ = [
    "CallableWeatherProvider",
    "WeatherProvider",
    "default_provider",
    "fetch_current_weather",
    "fetch_forecast",
    "search_city",
]
