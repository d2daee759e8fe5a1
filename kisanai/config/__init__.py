"""
Backend config: load from env.

load_postgres_config(), load_weather_config(), load_chatbot_config().
"""
from kisanai.config.chatbot import ChatbotConfig, load_chatbot_config
from kisanai.config.postgres import PostgresConfig, load_postgres_config
from kisanai.config.weather import WeatherConfig, load_weather_config

__all__ = [
    "PostgresConfig",
    "load_postgres_config",
    "WeatherConfig",
    "load_weather_config",
    "ChatbotConfig",
    "load_chatbot_config",
]
