from __future__ import annotations

import logging
from typing import Optional

from kisanai.clients.weather.base import BaseWeatherClient
from kisanai.clients.weather.openweather import OpenWeatherClient
from kisanai.clients.weather.static import StaticWeatherClient
from kisanai.config.weather import WeatherConfig, load_weather_config

logger = logging.getLogger(__name__)


def build_weather_client(config: Optional[WeatherConfig] = None) -> BaseWeatherClient:
    """OpenWeather when an API key is configured, otherwise the static client."""
    config = config or load_weather_config()
    if config.enabled:
        return OpenWeatherClient(config)
    logger.info("OPENWEATHER_API_KEY not set; using static weather estimates")
    return StaticWeatherClient()
