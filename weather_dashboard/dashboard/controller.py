"""
Dashboard state controller.

Owns the single DashboardState, runs the fetch -> aggregate -> render cycle,
keeps one auto-refresh timer and one search debounce timer alive, and pushes a
fresh DashboardView to every subscriber after each state change.

All methods must be called from inside the running event loop. State is only
mutated between awaits, so no locking is needed.
"""
from __future__ import annotations

import asyncio
from typing import Callable, Coroutine, List, Optional, Set

from weather_dashboard.config import settings
from weather_dashboard.dashboard.aggregator import aggregate_daily
from weather_dashboard.dashboard.favorites import DUPLICATE_NOTICE, FavoritesStore, ThemeStore
from weather_dashboard.dashboard.gateway import MIN_SEARCH_LENGTH, WeatherGateway
from weather_dashboard.dashboard.render import DashboardView, render_dashboard
from weather_dashboard.dashboard.state import (
    DashboardState,
    DashboardStatus,
    SearchSuggestion,
    TemperatureUnit,
)
from weather_dashboard.dashboard.timers import RepeatingTimer
from weather_dashboard.exceptions import TransportFailureError, UpstreamFailureError, WeatherDashboardError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="dashboard/controller")

EMPTY_SEARCH_ERROR = "Please enter a city name"
GENERIC_LOAD_ERROR = "Failed to load weather data. Please try again."

ViewListener = Callable[[DashboardView], None]


class DashboardController:
    """Coordinates loads, unit switches, search, favorites and timers."""

    def __init__(
        self,
        gateway: WeatherGateway,
        favorites: FavoritesStore,
        theme_store: Optional[ThemeStore] = None,
        *,
        city: Optional[str] = None,
        auto_refresh_seconds: Optional[float] = None,
        search_debounce_seconds: Optional[float] = None,
        max_forecast_days: Optional[int] = None,
        system_dark: bool = False,
    ) -> None:
        self.gateway = gateway
        self.favorites = favorites
        self.theme_store = theme_store
        self.auto_refresh_seconds = auto_refresh_seconds or settings.auto_refresh_seconds
        self.search_debounce_seconds = search_debounce_seconds or settings.search_debounce_seconds
        self.max_forecast_days = max_forecast_days or settings.max_forecast_days
        self.system_dark = system_dark

        self.state = DashboardState(city=city or settings.default_city)
        self.state.favorites = favorites.list()
        if theme_store is not None:
            self.state.theme = theme_store.get(system_dark)

        self._listeners: List[ViewListener] = []
        self._tasks: Set[asyncio.Task] = set()
        self._load_seq = 0
        self._latest_query: Optional[str] = None
        self._closed = False

    # ------------------------------------------------------------------
    # rendering
    # ------------------------------------------------------------------

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """Register `listener` for every new view; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def view(self) -> DashboardView:
        return render_dashboard(self.state)

    def _render(self) -> None:
        view = render_dashboard(self.state)
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                logger.exception("View listener failed")

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # ------------------------------------------------------------------
    # loading
    # ------------------------------------------------------------------

    async def start(self) -> DashboardStatus:
        """Initial load of the configured city, then keep it refreshed."""
        logger.info("Weather dashboard initializing...")
        status = await self.load_city(self.state.city)
        self.start_auto_refresh()
        logger.info("Weather dashboard ready")
        return status

    async def load_city(self, city: str) -> DashboardStatus:
        """
        Fetch current conditions and forecast for `city` concurrently.

        Ends in READY with both payloads stored, or ERROR with the message of the
        first failing fetch. A response that arrives after a newer load was issued
        is discarded.
        """
        self._load_seq += 1
        seq = self._load_seq

        self.state.status = DashboardStatus.LOADING
        self.state.error = None
        self.state.notice = None
        self.state.city = city
        self._render()

        try:
            weather, forecast = await asyncio.gather(
                self.gateway.fetch_current(city),
                self.gateway.fetch_forecast(city),
            )
        except WeatherDashboardError as exc:
            return self._fail(seq, city, exc.message or GENERIC_LOAD_ERROR)
        except Exception:
            logger.exception(f"Unexpected error loading {city!r}")
            return self._fail(seq, city, GENERIC_LOAD_ERROR)

        if seq != self._load_seq:
            logger.info(f"Discarding stale weather response for {city!r}")
            return self.state.status

        self.state.weather = weather
        self.state.forecast = forecast
        self.state.daily = aggregate_daily(
            forecast.samples,
            utc_offset_seconds=forecast.utc_offset_seconds,
            max_days=self.max_forecast_days,
        )
        self.state.status = DashboardStatus.READY
        self._render()
        logger.info(f"Loaded weather for {weather.city}, {weather.country} ({len(self.state.daily)} forecast days)")

        self.start_auto_refresh()
        return self.state.status

    def _fail(self, seq: int, city: str, message: str) -> DashboardStatus:
        if seq != self._load_seq:
            logger.info(f"Discarding stale error for {city!r}: {message}")
            return self.state.status
        logger.warning(f"Error loading weather data for {city!r}: {message}")
        self.state.status = DashboardStatus.ERROR
        self.state.error = message
        self._render()
        return self.state.status

    async def refresh(self) -> DashboardStatus:
        return await self.load_city(self.state.city)

    async def submit_search(self, text: str) -> DashboardStatus:
        """Load whatever is in the search box; empty input is rejected locally."""
        city = text.strip()
        if not city:
            self.state.status = DashboardStatus.ERROR
            self.state.error = EMPTY_SEARCH_ERROR
            self._render()
            return self.state.status
        self._cancel_search_timer()
        self.state.suggestion = None
        return await self.load_city(city)

    # ------------------------------------------------------------------
    # units and theme
    # ------------------------------------------------------------------

    def switch_unit(self, unit: TemperatureUnit | str) -> bool:
        """Re-render stored data in `unit`; returns False when nothing changed."""
        unit = TemperatureUnit(unit)
        if unit is self.state.unit:
            return False
        self.state.unit = unit
        self._render()
        return True

    def toggle_theme(self) -> None:
        if self.theme_store is None:
            return
        self.state.theme = self.theme_store.toggle(self.system_dark)
        self._render()

    # ------------------------------------------------------------------
    # auto-refresh
    # ------------------------------------------------------------------

    def start_auto_refresh(self) -> Optional[RepeatingTimer]:
        """(Re)start the refresh timer; any previous timer is cancelled first. No-op after shutdown."""
        self.stop_auto_refresh()
        if self._closed:
            return None
        timer = RepeatingTimer(self.auto_refresh_seconds, self._on_refresh_tick, name="auto-refresh")
        self.state.refresh_timer = timer.start()
        logger.debug(f"Auto-refresh enabled: every {self.auto_refresh_seconds}s")
        return timer

    def stop_auto_refresh(self) -> None:
        if self.state.refresh_timer is not None:
            self.state.refresh_timer.cancel()
            self.state.refresh_timer = None

    def _on_refresh_tick(self) -> None:
        logger.info("Auto-refreshing weather data...")
        self._spawn(self.load_city(self.state.city))

    # ------------------------------------------------------------------
    # search-as-you-type
    # ------------------------------------------------------------------

    def on_search_input(self, text: str) -> None:
        """Debounce keystrokes; short queries just clear the suggestion."""
        query = text.strip()
        self._cancel_search_timer()

        if len(query) < MIN_SEARCH_LENGTH:
            self._latest_query = None
            if self.state.suggestion is not None:
                self.state.suggestion = None
                self._render()
            return

        self._latest_query = query
        loop = asyncio.get_running_loop()
        self.state.search_timer = loop.call_later(self.search_debounce_seconds, self._on_search_timer, query)

    def _cancel_search_timer(self) -> None:
        if self.state.search_timer is not None:
            self.state.search_timer.cancel()
            self.state.search_timer = None

    def _on_search_timer(self, query: str) -> None:
        self.state.search_timer = None
        self._spawn(self._run_search(query))

    async def _run_search(self, query: str) -> None:
        suggestion: Optional[SearchSuggestion]
        try:
            result = await self.gateway.search_city(query)
        except (UpstreamFailureError, TransportFailureError):
            # show a "no results" row; only unexpected payloads hide the dropdown
            suggestion = SearchSuggestion(query=query)
        except WeatherDashboardError as exc:
            logger.warning(f"Search error: {exc}")
            suggestion = None
        except Exception:
            logger.exception(f"Unexpected error searching for {query!r}")
            suggestion = None
        else:
            suggestion = SearchSuggestion(query=query, result=result)

        if query != self._latest_query:
            logger.debug(f"Dropping search result for outdated query {query!r}")
            return
        self.state.suggestion = suggestion
        self._render()

    async def select_suggestion(self, city: str) -> DashboardStatus:
        self._cancel_search_timer()
        self._latest_query = None
        self.state.suggestion = None
        return await self.load_city(city)

    def dismiss_suggestion(self) -> None:
        if self.state.suggestion is not None:
            self.state.suggestion = None
            self._render()

    # ------------------------------------------------------------------
    # favorites
    # ------------------------------------------------------------------

    def add_current_to_favorites(self) -> bool:
        """Add the displayed city; False when nothing is loaded or it is a duplicate."""
        if self.state.weather is None:
            return False
        city = self.state.weather.city
        added = self.favorites.add(city)
        self.state.notice = f"Added {city} to favorites" if added else DUPLICATE_NOTICE
        self.state.favorites = self.favorites.list()
        self._render()
        return added

    def remove_favorite(self, city: str) -> None:
        self.favorites.remove(city)
        self.state.favorites = self.favorites.list()
        self._render()

    async def load_favorite(self, city: str) -> DashboardStatus:
        return await self.load_city(city)

    # ------------------------------------------------------------------
    # shutdown
    # ------------------------------------------------------------------

    async def shutdown(self) -> None:
        """Stop both timers and cancel background loads/searches; loads still in flight are discarded."""
        self._closed = True
        self._load_seq += 1
        self._latest_query = None
        self.stop_auto_refresh()
        self._cancel_search_timer()
        current = asyncio.current_task()
        pending = [t for t in self._tasks if t is not current and not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.info("Weather dashboard stopped")
