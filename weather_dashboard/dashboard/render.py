"""Pure rendering: DashboardState -> DashboardView, plus a plain-text formatter."""
from __future__ import annotations

import math
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from weather_dashboard.dashboard.aggregator import DailyForecast, local_datetime
from weather_dashboard.dashboard.state import DashboardState, DashboardStatus, TemperatureUnit, Theme
from weather_dashboard.models import WeatherSnapshot

ICON_URL_TEMPLATE = "https://openweathermap.org/img/wn/{code}@4x.png"
DEFAULT_EMOJI = "🌤️"
NO_RESULTS_TEXT = "No results found"

WEATHER_EMOJI = {
    "01d": "☀️", "01n": "🌙",
    "02d": "⛅", "02n": "☁️",
    "03d": "☁️", "03n": "☁️",
    "04d": "☁️", "04n": "☁️",
    "09d": "🌧️", "09n": "🌧️",
    "10d": "🌦️", "10n": "🌧️",
    "11d": "⛈️", "11n": "⛈️",
    "13d": "❄️", "13n": "❄️",
    "50d": "🌫️", "50n": "🌫️",
}

UNIT_SYMBOLS = {
    TemperatureUnit.CELSIUS: "°C",
    TemperatureUnit.FAHRENHEIT: "°F",
}


class _View(BaseModel):
    model_config = ConfigDict(frozen=True)


class CurrentPanel(_View):
    location: str
    date_label: str
    icon_url: str
    emoji: str
    temperature: str
    description: str
    feels_like: str
    temp_min: str
    temp_max: str
    humidity: str
    wind_speed: str
    pressure: str
    clouds: str


class ForecastCard(_View):
    date_label: str
    icon_url: str
    description: str
    temperature: str
    temp_min: Optional[str] = None
    temp_max: Optional[str] = None
    humidity: str


class SuggestionView(_View):
    title: str
    subtitle: Optional[str] = None
    city: Optional[str] = None  # None for the "no results" row


class DashboardView(_View):
    """Everything a front end needs to draw the dashboard."""
    status: DashboardStatus
    loading: bool
    error: Optional[str] = None
    city: str
    unit: TemperatureUnit
    theme: Theme
    current: Optional[CurrentPanel] = None
    forecast: Tuple[ForecastCard, ...] = ()
    suggestion: Optional[SuggestionView] = None
    favorites: Tuple[str, ...] = ()
    notice: Optional[str] = None


def convert_temperature(celsius: float, unit: TemperatureUnit) -> float:
    """Celsius to the display unit; F = C * 9/5 + 32."""
    if unit is TemperatureUnit.FAHRENHEIT:
        return celsius * 9 / 5 + 32
    return celsius


def round_half_up(value: float) -> int:
    """Round .5 towards +infinity (so -2.5 -> -2), unlike Python's banker's rounding."""
    return math.floor(value + 0.5)


def format_temperature(celsius: float, unit: TemperatureUnit) -> str:
    return f"{round_half_up(convert_temperature(celsius, unit))}{UNIT_SYMBOLS[unit]}"


def weather_icon_url(icon_code: str) -> str:
    return ICON_URL_TEMPLATE.format(code=icon_code)


def weather_emoji(icon_code: str) -> str:
    return WEATHER_EMOJI.get(icon_code, DEFAULT_EMOJI)


def format_current_date(timestamp: int, utc_offset_seconds: int = 0) -> str:
    """e.g. "Monday, January 5, 2026 14:05" in the city's local time."""
    moment = local_datetime(timestamp, utc_offset_seconds)
    return f"{moment:%A}, {moment:%B} {moment.day}, {moment.year} {moment:%H:%M}"


def format_forecast_date(timestamp: int, utc_offset_seconds: int = 0) -> str:
    """e.g. "Mon, Jan 5"."""
    moment = local_datetime(timestamp, utc_offset_seconds)
    return f"{moment:%a}, {moment:%b} {moment.day}"


def _format_number(value: float) -> str:
    """Drop a trailing .0 the way the provider's integers print."""
    return str(int(value)) if float(value).is_integer() else str(value)


def render_current(weather: WeatherSnapshot, unit: TemperatureUnit) -> CurrentPanel:
    return CurrentPanel(
        location=f"{weather.city}, {weather.country}",
        date_label=format_current_date(weather.timestamp, weather.timezone),
        icon_url=weather_icon_url(weather.weather.icon),
        emoji=weather_emoji(weather.weather.icon),
        temperature=format_temperature(weather.temperature, unit),
        description=weather.weather.description,
        feels_like=format_temperature(weather.feels_like, unit),
        temp_min=format_temperature(weather.temp_min, unit),
        temp_max=format_temperature(weather.temp_max, unit),
        humidity=f"{_format_number(weather.humidity)}%",
        wind_speed=f"{_format_number(weather.wind_speed)} m/s",
        pressure=f"{_format_number(weather.pressure)} hPa",
        clouds=f"{_format_number(weather.clouds)}%",
    )


def render_forecast_card(day: DailyForecast, unit: TemperatureUnit, utc_offset_seconds: int = 0) -> ForecastCard:
    sample = day.sample
    has_range = day.temp_min is not None and day.temp_max is not None
    return ForecastCard(
        date_label=format_forecast_date(sample.timestamp, utc_offset_seconds),
        icon_url=weather_icon_url(sample.weather.icon),
        description=sample.weather.description,
        temperature=format_temperature(sample.temperature, unit),
        temp_min=format_temperature(day.temp_min, unit) if has_range else None,
        temp_max=format_temperature(day.temp_max, unit) if has_range else None,
        humidity=f"{_format_number(sample.humidity)}%",
    )


def render_dashboard(state: DashboardState) -> DashboardView:
    """
    Build the view for `state`.

    Weather content is only shown once a load has completed successfully; while
    loading or after an error the content area is empty.
    """
    current: Optional[CurrentPanel] = None
    cards: List[ForecastCard] = []
    if state.status is DashboardStatus.READY:
        if state.weather is not None:
            current = render_current(state.weather, state.unit)
        offset = state.forecast.utc_offset_seconds if state.forecast else 0
        cards = [render_forecast_card(day, state.unit, offset) for day in state.daily]

    suggestion: Optional[SuggestionView] = None
    if state.suggestion is not None:
        result = state.suggestion.result
        if result is None:
            suggestion = SuggestionView(title=NO_RESULTS_TEXT)
        else:
            suggestion = SuggestionView(
                title=f"{result.name}, {result.country}",
                subtitle=f"Lat: {result.lat}, Lon: {result.lon}",
                city=result.name,
            )

    return DashboardView(
        status=state.status,
        loading=state.status is DashboardStatus.LOADING,
        error=state.error if state.status is DashboardStatus.ERROR else None,
        city=state.city,
        unit=state.unit,
        theme=state.theme,
        current=current,
        forecast=tuple(cards),
        suggestion=suggestion,
        favorites=tuple(state.favorites),
        notice=state.notice,
    )


def format_view_text(view: DashboardView) -> str:
    """Render a DashboardView as plain text for the terminal runner."""
    if view.loading:
        return f"Loading weather for {view.city}..."
    if view.error:
        return f"Error: {view.error}"

    lines: List[str] = []
    if view.current:
        c = view.current
        lines += [
            f"{c.emoji}  {c.location}",
            c.date_label,
            f"{c.temperature}  {c.description} (feels like {c.feels_like})",
            f"Min {c.temp_min} / Max {c.temp_max}",
            f"Humidity {c.humidity}  Wind {c.wind_speed}  Pressure {c.pressure}  Clouds {c.clouds}",
        ]
    if view.forecast:
        lines.append("")
        for card in view.forecast:
            temp_range = f"  {card.temp_min}/{card.temp_max}" if card.temp_min and card.temp_max else ""
            lines.append(f"{card.date_label:<12} {card.temperature:>6}{temp_range}  {card.description}  {card.humidity}")
    if view.suggestion:
        lines += ["", f"Suggestion: {view.suggestion.title}"]
    if view.notice:
        lines += ["", view.notice]
    return "\n".join(lines)


def format_favorites_text(favorites: Tuple[str, ...]) -> str:
    """Favorites panel text; an empty list gets a hint instead of a bare blank."""
    if not favorites:
        return "No favorites yet\nAdd cities to quickly access their weather"
    return "\n".join(f"* {city}" for city in favorites)
