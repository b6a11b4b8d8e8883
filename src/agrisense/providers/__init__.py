"""Weather data providers."""

from agrisense.providers.base import (
    AuthenticationError,
    ProviderError,
    RateLimitError,
    WeatherProvider,
    WeatherReport,
)
from agrisense.providers.openweather import OpenWeatherProvider

__all__ = [
    "WeatherProvider",
    "WeatherReport",
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "OpenWeatherProvider",
]
