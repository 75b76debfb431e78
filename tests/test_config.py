import os
import unittest

from pydantic import ValidationError

from weather_dashboard.config import Settings


class _EnvOverride:
    """Set env vars for the duration of a with-block, restoring previous values."""

    def __init__(self, **values):
        self.values = values
        self.previous = {}

    def __enter__(self):
        for key, value in self.values.items():
            self.previous[key] = os.environ.get(key)
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        return self

    def __exit__(self, *exc):
        for key, value in self.previous.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        return False


class TestConfig(unittest.TestCase):
    def test_settings_defaults(self):
        with _EnvOverride(
            WEATHER_DEFAULT_CITY=None,
            WEATHER_PROXY_URL=None,
            WEATHER_AUTO_REFRESH_SECONDS=None,
            WEATHER_STORE_BACKEND=None,
        ):
            s = Settings()
            self.assertEqual(s.default_city, "Jakarta")
            self.assertIsNone(s.proxy_url)
            self.assertEqual(s.auto_refresh_seconds, 300.0)
            self.assertEqual(s.search_debounce_seconds, 0.5)
            self.assertEqual(s.max_forecast_days, 5)
            self.assertEqual(s.favorites_key, "weatherDashboard_favorites")
            self.assertEqual(s.store_backend, "file")

    def test_settings_env_override(self):
        with _EnvOverride(WEATHER_DEFAULT_CITY="Bandung", WEATHER_AUTO_REFRESH_SECONDS="60"):
            s = Settings()
            self.assertEqual(s.default_city, "Bandung")
            self.assertEqual(s.auto_refresh_seconds, 60.0)

    def test_base_url_gets_single_trailing_slash(self):
        with _EnvOverride(WEATHER_OPENWEATHER_BASE_URL="https://example.com/data/2.5//"):
            s = Settings()
            self.assertEqual(s.openweather_base_url, "https://example.com/data/2.5/")

    def test_proxy_url_normalized(self):
        with _EnvOverride(WEATHER_PROXY_URL="http://localhost:8000/"):
            self.assertEqual(Settings().proxy_url, "http://localhost:8000")
        with _EnvOverride(WEATHER_PROXY_URL=""):
            self.assertIsNone(Settings().proxy_url)

    def test_non_positive_interval_rejected(self):
        with _EnvOverride(WEATHER_AUTO_REFRESH_SECONDS="0"):
            with self.assertRaises(ValidationError):
                Settings()


if __name__ == "__main__":
    unittest.main()
