"""Terminal weather dashboard: prints a fresh view on every state change."""
import argparse
import asyncio
import os

from weather_dashboard.config import settings
from weather_dashboard.dashboard import DashboardController, FavoritesStore, ThemeStore, build_gateway
from weather_dashboard.dashboard.render import format_favorites_text, format_view_text
from weather_dashboard.kv_store import build_kv_store
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="dashboard")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("city", nargs="?", default=settings.default_city, help="City to show on startup")
    parser.add_argument("--fahrenheit", action="store_true", help="Display temperatures in Fahrenheit")
    parser.add_argument("--favorite", action="store_true", help="Add the loaded city to favorites")
    parser.add_argument("--once", action="store_true", help="Load once and exit instead of auto-refreshing")
    return parser.parse_args(argv)


def print_view(view) -> None:
    if view.loading:
        return
    print(format_view_text(view))
    print()
    print(format_favorites_text(view.favorites))
    print("-" * 40, flush=True)


async def run(args: argparse.Namespace) -> None:
    store = build_kv_store()
    controller = DashboardController(
        build_gateway(),
        FavoritesStore(store),
        ThemeStore(store),
        city=args.city,
    )
    if args.fahrenheit:
        controller.switch_unit("fahrenheit")
    controller.subscribe(print_view)

    try:
        await controller.start()
        if args.favorite:
            controller.add_current_to_favorites()
        if not args.once:
            # refreshes happen on the controller's timer until interrupted
            await asyncio.Event().wait()
    finally:
        await controller.shutdown()


if __name__ == "__main__":
    setup_logging(level=os.getenv("LOG_LEVEL", "INFO"), service="weather-dashboard")
    try:
        asyncio.run(run(parse_args()))
    except KeyboardInterrupt:
        logger.info("Interrupted")
