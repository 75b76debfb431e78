"""Configuration for the proxy and the dashboard, pulled from WEATHER_* env vars."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the weather proxy and dashboard."""
    model_config = SettingsConfigDict(env_prefix="WEATHER_", extra="ignore")

    # proxy -> OpenWeatherMap
    openweather_api_key: str | None = None
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5/"
    provider_timeout_seconds: float = 30.0
    units: str = "metric"
    api_key: str | None = None  # optional X-API-Key guard on the proxy

    # dashboard -> proxy
    proxy_url: str | None = None  # None: call the provider in-process
    proxy_timeout_seconds: float = 35.0
    default_city: str = "Jakarta"
    auto_refresh_seconds: float = 300.0
    search_debounce_seconds: float = 0.5
    max_forecast_days: int = 5

    # local key-value store
    favorites_key: str = "weatherDashboard_favorites"
    theme_key: str = "theme"
    store_backend: str = "file"  # options: memory, file, redis
    store_file_path: str = ".weather_dashboard.json"
    store_redis_url: str | None = None
    store_redis_prefix: str = "weather_dashboard:"

    @field_validator("openweather_base_url", mode="after")
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        """Endpoints are joined onto the base URL, so it must end with one slash."""
        return str(v).rstrip("/") + "/"

    @field_validator("proxy_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        """Normalize the proxy URL; an empty string means no proxy."""
        if not v:
            return None
        return str(v).rstrip("/")

    @field_validator(
        "provider_timeout_seconds",
        "proxy_timeout_seconds",
        "auto_refresh_seconds",
        "search_debounce_seconds",
        "max_forecast_days",
        mode="after",
    )
    @classmethod
    def must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'openweather_api_key', 'api_key'})}")
