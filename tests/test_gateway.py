import unittest

import requests

from weather_dashboard.config import Settings
from weather_dashboard.dashboard.gateway import (
    NETWORK_ERROR,
    DirectGateway,
    ProxyGateway,
    build_gateway,
    parse_forecast,
)
from weather_dashboard.exceptions import (
    InputValidationError,
    MalformedResponseError,
    TransportFailureError,
    UpstreamFailureError,
)
from weather_dashboard.models import CitySearchResult, WeatherSnapshot
from weather_dashboard.providers import CallableWeatherProvider

SNAPSHOT_DATA = {
    "city": "Jakarta",
    "country": "ID",
    "temperature": 31.2,
    "feels_like": 35.4,
    "temp_min": 30.1,
    "temp_max": 32.6,
    "humidity": 66,
    "pressure": 1009,
    "wind_speed": 3.6,
    "wind_deg": 210,
    "clouds": 40,
    "weather": {"main": "Clouds", "description": "scattered clouds", "icon": "03d"},
    "timestamp": 1704430800,
    "sunrise": 1704408000,
    "sunset": 1704452400,
    "timezone": 25200,
}

FORECAST_DATA = {
    "city": "Jakarta",
    "country": "ID",
    "timezone": 25200,
    "list": [
        {
            "dt": 1704434400,
            "main": {"temp": 30.0, "humidity": 70},
            "weather": [{"main": "Rain", "description": "light rain", "icon": "10d"}],
        }
    ],
}


class DummyResp:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, payload=None, error=None, status_code=200):
        self.payload = payload
        self.error = error
        self.status_code = status_code
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return DummyResp(self.payload, self.status_code)


class TestProxyGateway(unittest.IsolatedAsyncioTestCase):
    def _gateway(self, session, api_key=None):
        return ProxyGateway("http://proxy.local/", timeout=5, api_key=api_key, session=session)

    async def test_fetch_current(self):
        session = FakeSession({"success": True, "data": SNAPSHOT_DATA})

        snapshot = await self._gateway(session, api_key="k").fetch_current("Jakarta")

        self.assertEqual(snapshot.city, "Jakarta")
        self.assertEqual(snapshot.weather.icon, "03d")
        url, kwargs = session.calls[0]
        self.assertEqual(url, "http://proxy.local/api")
        self.assertEqual(kwargs["params"], {"action": "current", "city": "Jakarta"})
        self.assertEqual(kwargs["headers"]["X-API-Key"], "k")
        self.assertEqual(kwargs["timeout"], 5)

    async def test_fetch_forecast(self):
        session = FakeSession({"success": True, "data": FORECAST_DATA})

        forecast = await self._gateway(session).fetch_forecast("Jakarta")

        self.assertEqual(forecast.utc_offset_seconds, 25200)
        self.assertEqual(len(forecast.samples), 1)
        self.assertEqual(forecast.samples[0].temperature, 30.0)
        self.assertNotIn("X-API-Key", session.calls[0][1]["headers"])

    async def test_search(self):
        session = FakeSession({"success": True, "data": {"name": "Jakarta", "country": "ID", "lat": -6.2, "lon": 106.8}})

        result = await self._gateway(session).search_city("Jak")

        self.assertEqual(result.name, "Jakarta")
        self.assertEqual(session.calls[0][1]["params"], {"action": "search", "q": "Jak"})

    async def test_failure_envelope(self):
        session = FakeSession({"success": False, "error": "city not found", "http_code": 404})

        with self.assertRaises(UpstreamFailureError) as ctx:
            await self._gateway(session).fetch_current("Atlantis")

        self.assertEqual(ctx.exception.message, "city not found")
        self.assertEqual(ctx.exception.status_code, 404)

    async def test_failure_envelope_without_message(self):
        session = FakeSession({"success": False})

        with self.assertRaises(UpstreamFailureError) as ctx:
            await self._gateway(session).fetch_forecast("Jakarta")

        self.assertEqual(ctx.exception.message, "Failed to fetch forecast data")

    async def test_network_error(self):
        session = FakeSession(error=requests.ConnectionError("refused"))

        with self.assertRaises(TransportFailureError) as ctx:
            await self._gateway(session).fetch_current("Jakarta")

        self.assertEqual(ctx.exception.message, NETWORK_ERROR)

    async def test_non_json_body(self):
        session = FakeSession(ValueError("not json"))
        with self.assertRaises(MalformedResponseError):
            await self._gateway(session).fetch_current("Jakarta")

    async def test_body_without_envelope(self):
        session = FakeSession(["unexpected"])
        with self.assertRaises(MalformedResponseError):
            await self._gateway(session).fetch_current("Jakarta")

    async def test_rejected_api_key_reports_detail(self):
        session = FakeSession({"detail": "Missing API key"}, status_code=401)

        with self.assertRaises(UpstreamFailureError) as ctx:
            await self._gateway(session).search_city("Jakarta")

        self.assertEqual(ctx.exception.message, "Missing API key")
        self.assertEqual(ctx.exception.status_code, 401)

    async def test_http_error_without_json_uses_fallback(self):
        session = FakeSession(ValueError("bad gateway page"), status_code=502)

        with self.assertRaises(UpstreamFailureError) as ctx:
            await self._gateway(session).fetch_current("Jakarta")

        self.assertEqual(ctx.exception.message, "Failed to fetch weather data")
        self.assertEqual(ctx.exception.status_code, 502)

    async def test_data_missing_fields(self):
        data = dict(SNAPSHOT_DATA)
        del data["temperature"]
        session = FakeSession({"success": True, "data": data})
        with self.assertRaises(MalformedResponseError):
            await self._gateway(session).fetch_current("Jakarta")

    async def test_input_validated_before_network(self):
        session = FakeSession({"success": True, "data": SNAPSHOT_DATA})
        gateway = self._gateway(session)

        with self.assertRaises(InputValidationError):
            await gateway.fetch_current("  ")
        with self.assertRaises(InputValidationError) as ctx:
            await gateway.search_city("a")
        self.assertEqual(ctx.exception.message, "Query too short")
        with self.assertRaises(InputValidationError) as ctx:
            await gateway.search_city("")
        self.assertEqual(ctx.exception.message, "Search query is required")

        self.assertEqual(session.calls, [])


class TestDirectGateway(unittest.IsolatedAsyncioTestCase):
    async def test_delegates_to_provider(self):
        snapshot = WeatherSnapshot.model_validate(SNAPSHOT_DATA)
        provider = CallableWeatherProvider(
            current=lambda city: snapshot,
            forecast=lambda city: FORECAST_DATA,
            search=lambda q: CitySearchResult(name="Jakarta", country="ID", lat=-6.2, lon=106.8),
        )
        gateway = DirectGateway(provider)

        self.assertEqual((await gateway.fetch_current("Jakarta")).city, "Jakarta")
        self.assertEqual((await gateway.fetch_forecast("Jakarta")).samples[0].weather.icon, "10d")
        self.assertEqual((await gateway.search_city("Jak")).country, "ID")

    async def test_provider_errors_propagate(self):
        def not_found(city):
            raise UpstreamFailureError("city not found", status_code=404)

        gateway = DirectGateway(CallableWeatherProvider(not_found, not_found, not_found))
        with self.assertRaises(UpstreamFailureError):
            await gateway.fetch_current("Atlantis")


class TestHelpers(unittest.TestCase):
    def test_parse_forecast_defaults_missing_timezone(self):
        data = dict(FORECAST_DATA, timezone=None)
        self.assertEqual(parse_forecast(data).utc_offset_seconds, 0)

    def test_parse_forecast_rejects_bad_entries(self):
        with self.assertRaises(MalformedResponseError):
            parse_forecast({"city": "Jakarta", "country": "ID", "list": [{"dt": 1}]})

    def test_build_gateway(self):
        proxy = build_gateway(Settings(proxy_url="http://localhost:8000/", api_key="k"))
        self.assertIsInstance(proxy, ProxyGateway)
        self.assertEqual(proxy.url, "http://localhost:8000/api")
        self.assertEqual(proxy.api_key, "k")

        self.assertIsInstance(build_gateway(Settings(proxy_url=None)), DirectGateway)


if __name__ == "__main__":
    unittest.main()
