from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class WeatherReport:
    """Ambient weather for a city (metric units)."""

    temp: float
    humidity: float
    description: str
    city: str


class BaseWeatherClient(ABC):
    @property
    @abstractmethod
    def provider(self) -> str:
        ...

    @abstractmethod
    async def get_weather(self, city: str) -> WeatherReport:
        """Return current weather for *city*. Implementations never raise for lookup failures."""
        ...

    async def aclose(self) -> None:
        """Release network resources. Default: nothing to release."""
        return None
