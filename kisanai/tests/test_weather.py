"""Tests for the weather clients: OpenWeather over a mocked transport, fallback, factory."""
from __future__ import annotations

import asyncio
import unittest

import httpx

from kisanai.clients.weather import (
    OpenWeatherClient,
    StaticWeatherClient,
    build_weather_client,
)
from kisanai.config.weather import WeatherConfig


def _run(coro):
    return asyncio.run(coro)


def _client(handler) -> OpenWeatherClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenWeatherClient(WeatherConfig(api_key="secret"), http_client=http)


class TestOpenWeatherClient(unittest.TestCase):
    def test_parses_payload_and_sends_query(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json={
                "main": {"temp": 31.4, "humidity": 58},
                "weather": [{"description": "haze"}],
            })

        report = _run(_client(handler).get_weather("Pune"))
        self.assertEqual((report.temp, report.humidity, report.description, report.city),
                         (31.4, 58.0, "haze", "Pune"))
        self.assertEqual(seen["q"], "Pune,IN")
        self.assertEqual(seen["units"], "metric")
        self.assertEqual(seen["appid"], "secret")

    def test_http_error_falls_back(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "city not found"})

        with self.assertLogs("kisanai.clients.weather.openweather", level="WARNING"):
            report = _run(_client(handler).get_weather("Atlantis"))
        self.assertEqual((report.temp, report.humidity, report.description), (30.0, 65.0, "unavailable"))

    def test_network_error_falls_back(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        report = _run(_client(handler).get_weather("Pune"))
        self.assertEqual(report.description, "unavailable")

    def test_bad_payload_falls_back(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"cod": 200})

        report = _run(_client(handler).get_weather("Pune"))
        self.assertEqual(report.temp, 30.0)

    def test_requires_key(self) -> None:
        with self.assertRaises(ValueError):
            OpenWeatherClient(WeatherConfig())

    def test_aclose_leaves_injected_client_open(self) -> None:
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        client = OpenWeatherClient(WeatherConfig(api_key="k"), http_client=http)
        _run(client.aclose())
        self.assertFalse(http.is_closed)


class TestFactory(unittest.TestCase):
    def test_static_without_key(self) -> None:
        client = build_weather_client(WeatherConfig())
        self.assertIsInstance(client, StaticWeatherClient)
        self.assertEqual(_run(client.get_weather("Pune")).city, "Pune")

    def test_openweather_with_key(self) -> None:
        client = build_weather_client(WeatherConfig(api_key="k"))
        self.assertEqual(client.provider, "openweather")
        _run(client.aclose())


if __name__ == "__main__":
    unittest.main()
