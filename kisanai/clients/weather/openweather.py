"""OpenWeather current-weather client over httpx."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from kisanai.clients.weather.base import BaseWeatherClient, WeatherReport
from kisanai.clients.weather.static import fallback_report
from kisanai.config.weather import WeatherConfig
from kisanai.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class OpenWeatherClient(BaseWeatherClient):
    """
    Looks up ``{city},{country}`` in metric units.

    Network or payload errors are logged and replaced by the static fallback
    report so a condition view never fails on weather.
    """

    def __init__(
        self,
        config: WeatherConfig,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not config.api_key:
            raise ValueError("OpenWeatherClient requires an API key")
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_seconds)

    @property
    def provider(self) -> str:
        return "openweather"

    async def _fetch(self, city: str) -> Dict[str, Any]:
        params = {
            "q": f"{city},{self._config.country_code}",
            "units": "metric",
            "appid": self._config.api_key,
        }
        try:
            response = await self._client.get(self._config.base_url, params=params)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ExternalServiceError(
                "Weather lookup failed",
                details={"city": city, "provider": self.provider},
                cause=exc,
            ) from exc

    async def get_weather(self, city: str) -> WeatherReport:
        try:
            data = await self._fetch(city)
            main = data["main"]
            weather = data.get("weather") or [{}]
            return WeatherReport(
                temp=float(main["temp"]),
                humidity=float(main["humidity"]),
                description=str(weather[0].get("description") or ""),
                city=city,
            )
        except ExternalServiceError as exc:
            logger.warning("Weather API error for %s: %s", city, exc.cause or exc)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.warning("Unexpected weather payload for %s: %s", city, exc)
        return fallback_report(city)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
