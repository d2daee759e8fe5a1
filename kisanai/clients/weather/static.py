"""Static weather client used when no OpenWeather API key is configured."""
from __future__ import annotations

from kisanai.clients.weather.base import BaseWeatherClient, WeatherReport

FALLBACK_TEMP = 30.0
FALLBACK_HUMIDITY = 65.0
FALLBACK_DESCRIPTION = "unavailable"


def fallback_report(city: str) -> WeatherReport:
    return WeatherReport(
        temp=FALLBACK_TEMP,
        humidity=FALLBACK_HUMIDITY,
        description=FALLBACK_DESCRIPTION,
        city=city,
    )


class StaticWeatherClient(BaseWeatherClient):
    """Returns the same fixed report for every city."""

    @property
    def provider(self) -> str:
        return "static"

    async def get_weather(self, city: str) -> WeatherReport:
        return fallback_report(city)
