import os

import uvicorn

from weather_dashboard.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def check_provider_key() -> None:
    """
    Warn early when no OpenWeatherMap key is configured.

    The proxy still starts; every provider call will come back as an upstream
    failure until WEATHER_OPENWEATHER_API_KEY is set.
    """
    if not settings.openweather_api_key:
        logger.warning("WEATHER_OPENWEATHER_API_KEY is not set; provider calls will fail")


if __name__ == "__main__":
    setup_logging(level=os.getenv("LOG_LEVEL", "INFO"), service="weather-proxy")
    check_provider_key()

    uvicorn.run(
        "weather_dashboard.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
        log_config=None,
    )
