"""Dashboard state owned by a single DashboardController."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from weather_dashboard.dashboard.aggregator import DailyForecast
from weather_dashboard.dashboard.timers import RepeatingTimer
from weather_dashboard.models import CitySearchResult, ForecastPayload, WeatherSnapshot


class TemperatureUnit(str, Enum):
    """Display unit; stored values are always Celsius."""
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"


class DashboardStatus(str, Enum):
    """Load lifecycle: idle -> loading -> ready | error, re-entered on every load."""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


@dataclass(frozen=True)
class SearchSuggestion:
    """Outcome of a search-as-you-type lookup; `result` is None for "no results"."""
    query: str
    result: Optional[CitySearchResult] = None


@dataclass
class DashboardState:
    """Everything the renderer needs, plus the live timer handles."""
    city: str
    unit: TemperatureUnit = TemperatureUnit.CELSIUS
    status: DashboardStatus = DashboardStatus.IDLE
    error: Optional[str] = None
    weather: Optional[WeatherSnapshot] = None
    forecast: Optional[ForecastPayload] = None
    daily: List[DailyForecast] = field(default_factory=list)
    suggestion: Optional[SearchSuggestion] = None
    favorites: List[str] = field(default_factory=list)
    theme: Theme = Theme.LIGHT
    notice: Optional[str] = None
    refresh_timer: Optional[RepeatingTimer] = None
    search_timer: Optional[asyncio.TimerHandle] = None
