"""Pydantic schemas for weather payloads exchanged between provider, proxy and dashboard."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _FrozenModel(BaseModel):
    """Immutable model; refreshed data replaces instances wholesale."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class WeatherCondition(_FrozenModel):
    """Condition descriptor: category, free text and icon code."""
    main: str
    description: str
    icon: str


class WeatherSnapshot(_FrozenModel):
    """Current conditions for one city, temperatures in Celsius."""
    city: str
    country: str
    temperature: float
    feels_like: float
    temp_min: float
    temp_max: float
    humidity: float
    pressure: float
    wind_speed: float
    wind_deg: float = 0
    clouds: float
    weather: WeatherCondition
    timestamp: int
    sunrise: int
    sunset: int
    timezone: int  # UTC offset, seconds


class ForecastSample(_FrozenModel):
    """A single 3-hour forecast entry."""
    timestamp: int
    temperature: float
    humidity: float
    weather: WeatherCondition

    @classmethod
    def from_provider(cls, item: dict[str, Any]) -> "ForecastSample":
        """Build from a provider-native list entry (`dt`, `main`, `weather[0]`)."""
        weather = item["weather"][0]
        return cls(
            timestamp=item["dt"],
            temperature=item["main"]["temp"],
            humidity=item["main"]["humidity"],
            weather=WeatherCondition(
                main=weather["main"],
                description=weather["description"],
                icon=weather["icon"],
            ),
        )


class ForecastPayload(_FrozenModel):
    """Forecast feed for one city as consumed by the dashboard."""
    city: str
    country: str
    samples: List[ForecastSample] = Field(default_factory=list)
    utc_offset_seconds: int = 0


class CitySearchResult(_FrozenModel):
    """Result of a city lookup."""
    name: str
    country: str
    lat: float
    lon: float


class ApiEnvelope(BaseModel):
    """Uniform proxy response: `data` on success, `error` otherwise."""
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    http_code: Optional[int] = None
