"""Async access to weather data for the dashboard: through the proxy or in-process."""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Protocol

import requests
from pydantic import ValidationError

from weather_dashboard import config
from weather_dashboard.exceptions import (
    InputValidationError,
    MalformedResponseError,
    TransportFailureError,
    UpstreamFailureError,
)
from weather_dashboard.models import ApiEnvelope, CitySearchResult, ForecastPayload, ForecastSample, WeatherSnapshot
from weather_dashboard.providers import WeatherProvider, default_provider
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="dashboard/gateway")

MIN_SEARCH_LENGTH = 2
NETWORK_ERROR = "Network error. Please check your connection."
MALFORMED_ERROR = "Unexpected response from weather service"
CURRENT_FALLBACK_ERROR = "Failed to fetch weather data"
FORECAST_FALLBACK_ERROR = "Failed to fetch forecast data"
SEARCH_FALLBACK_ERROR = "City not found"


class WeatherGateway(Protocol):
    """The three operations the dashboard needs; failures raise WeatherDashboardError."""

    async def fetch_current(self, city: str) -> WeatherSnapshot:
        ...

    async def fetch_forecast(self, city: str) -> ForecastPayload:
        ...

    async def search_city(self, query: str) -> CitySearchResult:
        ...


def _require_city(city: str) -> str:
    if not city or not city.strip():
        raise InputValidationError("City name is required")
    return city


def _require_query(query: str) -> str:
    if not query:
        raise InputValidationError("Search query is required")
    if len(query) < MIN_SEARCH_LENGTH:
        raise InputValidationError("Query too short")
    return query


def parse_snapshot(data: Any) -> WeatherSnapshot:
    """Validate a proxy `current` payload."""
    try:
        return WeatherSnapshot.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(MALFORMED_ERROR) from exc


def parse_forecast(data: Any) -> ForecastPayload:
    """Turn a `{city, country, list, timezone}` payload into a ForecastPayload."""
    try:
        return ForecastPayload(
            city=data["city"],
            country=data["country"],
            samples=[ForecastSample.from_provider(item) for item in data["list"]],
            utc_offset_seconds=data.get("timezone") or 0,
        )
    except (KeyError, IndexError, TypeError, AttributeError, ValidationError) as exc:
        raise MalformedResponseError(MALFORMED_ERROR) from exc


def parse_search(data: Any) -> CitySearchResult:
    try:
        return CitySearchResult.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(MALFORMED_ERROR) from exc


def _is_success(http_code: int) -> bool:
    return 200 <= http_code < 300


def _http_failure(http_code: int, body: Any, fallback_error: str) -> UpstreamFailureError:
    """Error for a non-2xx proxy reply that is not an envelope, e.g. the API key guard's 401."""
    detail = body.get("detail") if isinstance(body, dict) else None
    message = detail if isinstance(detail, str) and detail else fallback_error
    logger.error(f"Proxy answered HTTP {http_code}: {message}")
    return UpstreamFailureError(message, status_code=http_code)


class ProxyGateway(WeatherGateway):
    """Talk to the proxy's `GET /api?action=...` endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 35.0,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/api"
        self.timeout = timeout
        self.api_key = api_key
        self.session = session or requests.Session()

    def _request(self, action: str, params: Dict[str, str], fallback_error: str) -> Any:
        """Blocking call; returns the envelope's `data` or raises."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        try:
            resp = self.session.get(
                self.url,
                params={"action": action, **params},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error(f"API request error ({action}): {exc}")
            raise TransportFailureError(NETWORK_ERROR) from exc
        try:
            body = resp.json()
        except ValueError as exc:
            if not _is_success(resp.status_code):
                raise _http_failure(resp.status_code, None, fallback_error) from exc
            logger.error(f"Proxy returned a non-JSON body for {action}")
            raise MalformedResponseError(MALFORMED_ERROR) from exc

        try:
            envelope = ApiEnvelope.model_validate(body)
        except ValidationError as exc:
            if not _is_success(resp.status_code):
                raise _http_failure(resp.status_code, body, fallback_error) from exc
            raise MalformedResponseError(MALFORMED_ERROR) from exc
        if not envelope.success:
            raise UpstreamFailureError(envelope.error or fallback_error, status_code=envelope.http_code)
        return envelope.data

    async def fetch_current(self, city: str) -> WeatherSnapshot:
        _require_city(city)
        data = await asyncio.to_thread(self._request, "current", {"city": city}, CURRENT_FALLBACK_ERROR)
        return parse_snapshot(data)

    async def fetch_forecast(self, city: str) -> ForecastPayload:
        _require_city(city)
        data = await asyncio.to_thread(self._request, "forecast", {"city": city}, FORECAST_FALLBACK_ERROR)
        return parse_forecast(data)

    async def search_city(self, query: str) -> CitySearchResult:
        _require_query(query)
        data = await asyncio.to_thread(self._request, "search", {"q": query}, SEARCH_FALLBACK_ERROR)
        return parse_search(data)


class DirectGateway(WeatherGateway):
    """Call a WeatherProvider in-process, for running the dashboard without a proxy."""

    def __init__(self, provider: Optional[WeatherProvider] = None) -> None:
        self.provider = provider or default_provider()

    async def fetch_current(self, city: str) -> WeatherSnapshot:
        _require_city(city)
        return await asyncio.to_thread(self.provider.fetch_current_weather, city)

    async def fetch_forecast(self, city: str) -> ForecastPayload:
        _require_city(city)
        data = await asyncio.to_thread(self.provider.fetch_forecast, city)
        return parse_forecast(data)

    async def search_city(self, query: str) -> CitySearchResult:
        _require_query(query)
        return await asyncio.to_thread(self.provider.search_city, query)


def build_gateway(settings: config.Settings | None = None) -> WeatherGateway:
    """Use the proxy when `proxy_url` is configured, the provider directly otherwise."""
    settings = settings or config.settings
    if settings.proxy_url:
        logger.info(f"Using weather proxy at {settings.proxy_url}")
        return ProxyGateway(settings.proxy_url, timeout=settings.proxy_timeout_seconds, api_key=settings.api_key)
    logger.info("No proxy configured; calling OpenWeatherMap directly")
    return DirectGateway()
