"""Dashboard state, aggregation and rendering."""

from .aggregator import DailyForecast, aggregate_daily
from .controller import DashboardController
from .favorites import FavoritesStore, ThemeStore
from .gateway import DirectGateway, ProxyGateway, WeatherGateway, build_gateway
from .render import DashboardView, format_view_text, render_dashboard
from .state import DashboardState, DashboardStatus, TemperatureUnit, Theme

__all__ = [
    "DailyForecast",
    "aggregate_daily",
    "DashboardController",
    "FavoritesStore",
    "ThemeStore",
    "DirectGateway",
    "ProxyGateway",
    "WeatherGateway",
    "build_gateway",
    "DashboardView",
    "format_view_text",
    "render_dashboard",
    "DashboardState",
    "DashboardStatus",
    "TemperatureUnit",
    "Theme",
]
