"""Helpers for fetching current weather, forecasts and city lookups from OpenWeatherMap."""
from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import requests
from pydantic import ValidationError

from weather_dashboard.config import settings
from weather_dashboard.exceptions import (
    InputValidationError,
    MalformedResponseError,
    TransportFailureError,
    UpstreamFailureError,
)
from weather_dashboard.models import CitySearchResult, WeatherCondition, WeatherSnapshot
from utils.logging_utils import get_tagged_logger, mask_secret_params
logger = get_tagged_logger(__name__, tag="openweather_client")

# No response cache: every dashboard refresh must reach the provider.
session = requests.Session()

CURRENT_ENDPOINT = "weather"
FORECAST_ENDPOINT = "forecast"

CURRENT_FALLBACK_ERROR = "Failed to fetch weather data"
FORECAST_FALLBACK_ERROR = "Failed to fetch forecast data"
SEARCH_FALLBACK_ERROR = "City not found"
MIN_SEARCH_LENGTH = 2


def make_weather_request(endpoint: str, params: Dict[str, Any]) -> Tuple[int, Optional[Any]]:
    """
    Call an OpenWeatherMap endpoint and return (http_code, decoded JSON or None).

    Transport failures raise TransportFailureError; HTTP status interpretation is
    left to the caller so each operation can pick its own fallback message.
    """
    url = settings.openweather_base_url + endpoint
    query = {**params, "units": settings.units, "appid": settings.openweather_api_key or ""}

    try:
        resp = session.get(
            url,
            params=query,
            headers={"Accept": "application/json"},
            timeout=settings.provider_timeout_seconds,
            allow_redirects=True,
        )
    except requests.RequestException as exc:
        logger.warning("OpenWeatherMap request failed", extra={"endpoint": endpoint, "error": str(exc)})
        raise TransportFailureError(f"Connection error: {exc}", status_code=0) from exc

    logger.debug(f"GET {mask_secret_params(getattr(resp, 'url', url) or url)} -> {resp.status_code}")

    try:
        data = resp.json()
    except ValueError:
        data = None
    return resp.status_code, data


def _is_success(http_code: int) -> bool:
    return 200 <= http_code < 300


def _provider_message(data: Optional[Any], fallback: str) -> str:
    """Prefer the provider's own `message` field over our generic fallback."""
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return fallback


def _normalize_current(data: Any) -> WeatherSnapshot:
    """Map a raw `weather` response onto WeatherSnapshot."""
    try:
        main = data["main"]
        sys_info = data["sys"]
        condition = data["weather"][0]
        return WeatherSnapshot(
            city=data["name"],
            country=sys_info["country"],
            temperature=main["temp"],
            feels_like=main["feels_like"],
            temp_min=main["temp_min"],
            temp_max=main["temp_max"],
            humidity=main["humidity"],
            pressure=main["pressure"],
            wind_speed=data["wind"]["speed"],
            wind_deg=data["wind"].get("deg", 0),
            clouds=data["clouds"]["all"],
            weather=WeatherCondition(
                main=condition["main"],
                description=condition["description"],
                icon=condition["icon"],
            ),
            timestamp=data["dt"],
            sunrise=sys_info["sunrise"],
            sunset=sys_info["sunset"],
            timezone=data["timezone"],
        )
    except (KeyError, IndexError, TypeError, AttributeError, ValidationError) as exc:
        logger.warning("Unexpected OpenWeatherMap current-weather payload", extra={"error": str(exc)})
        raise MalformedResponseError("Unexpected response from weather provider") from exc


def fetch_current_weather(city: str) -> WeatherSnapshot:
    """Fetch current conditions for `city`."""
    http_code, data = make_weather_request(CURRENT_ENDPOINT, {"q": city})
    if not _is_success(http_code):
        raise UpstreamFailureError(_provider_message(data, CURRENT_FALLBACK_ERROR), status_code=http_code)
    return _normalize_current(data)


def fetch_forecast(city: str) -> Dict[str, Any]:
    """
    Fetch the 5-day / 3-hour forecast for `city`.

    The `list` entries are forwarded untouched; consumers parse what they need.
    """
    http_code, data = make_weather_request(FORECAST_ENDPOINT, {"q": city})
    if not _is_success(http_code):
        raise UpstreamFailureError(_provider_message(data, FORECAST_FALLBACK_ERROR), status_code=http_code)

    try:
        city_info = data["city"]
        forecast = {
            "city": city_info["name"],
            "country": city_info["country"],
            "list": data["list"],
            "timezone": city_info["timezone"],
        }
    except (KeyError, TypeError) as exc:
        logger.warning("Unexpected OpenWeatherMap forecast payload", extra={"error": str(exc)})
        raise MalformedResponseError("Unexpected response from weather provider") from exc
    if not isinstance(forecast["list"], list):
        raise MalformedResponseError("Unexpected response from weather provider")
    return forecast


def search_city(query: str) -> CitySearchResult:
    """Look up a city by (partial) name; the provider resolves it to one match."""
    if len(query) < MIN_SEARCH_LENGTH:
        raise InputValidationError("Query too short", status_code=400)

    try:
        http_code, data = make_weather_request(CURRENT_ENDPOINT, {"q": query})
    except TransportFailureError as exc:
        raise UpstreamFailureError(SEARCH_FALLBACK_ERROR) from exc
    if not _is_success(http_code):
        raise UpstreamFailureError(SEARCH_FALLBACK_ERROR)

    try:
        return CitySearchResult(
            name=data["name"],
            country=data["sys"]["country"],
            lat=data["coord"]["lat"],
            lon=data["coord"]["lon"],
        )
    except (KeyError, TypeError, ValidationError) as exc:
        logger.warning("Unexpected OpenWeatherMap search payload", extra={"error": str(exc)})
        raise MalformedResponseError("Unexpected response from weather provider") from exc
