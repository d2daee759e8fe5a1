"""
kisanai.config.weather – OpenWeather client settings.

Env vars: OPENWEATHER_API_KEY, WEATHER_BASE_URL, WEATHER_COUNTRY_CODE, WEATHER_TIMEOUT_SECONDS.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

_DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5/weather"


@dataclass(frozen=True)
class WeatherConfig:
    """Ambient weather lookup settings. No API key means the static client is used."""

    api_key: Optional[str] = None
    base_url: str = _DEFAULT_BASE_URL
    country_code: str = "IN"
    """Appended to the city query (``q=Pune,IN``)."""

    timeout_seconds: float = 10.0

    def __post_init__(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "WeatherConfig":
        return cls(
            api_key=os.environ.get("OPENWEATHER_API_KEY", "").strip() or None,
            base_url=os.environ.get("WEATHER_BASE_URL", _DEFAULT_BASE_URL),
            country_code=os.environ.get("WEATHER_COUNTRY_CODE", "IN"),
            timeout_seconds=float(os.environ.get("WEATHER_TIMEOUT_SECONDS", "10")),
        )


def load_weather_config() -> WeatherConfig:
    return WeatherConfig.from_env()
