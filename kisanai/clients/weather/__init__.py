"""
Weather clients: base, OpenWeather, static fallback.

build_weather_client(config) picks the implementation from WeatherConfig.
"""
from kisanai.clients.weather.base import BaseWeatherClient, WeatherReport
from kisanai.clients.weather.factory import build_weather_client
from kisanai.clients.weather.openweather import OpenWeatherClient
from kisanai.clients.weather.static import StaticWeatherClient, fallback_report

__all__ = [
    "BaseWeatherClient",
    "WeatherReport",
    "OpenWeatherClient",
    "StaticWeatherClient",
    "build_weather_client",
    "fallback_report",
]
