"""OpenWeatherMap provider.

## API Documentation Summary
Source: https://openweathermap.org/current
Source: https://openweathermap.org/forecast5

## Endpoints
- Current: https://api.openweathermap.org/data/2.5/weather?q={city}
- Forecast: https://api.openweathermap.org/data/2.5/forecast?q={city}
  (5 days in 3-hour steps, 40 slices)

## Authentication
- API key passed as the `appid` query parameter

## Request Parameters
| Parameter | Description |
|-----------|-------------|
| q | City name, optionally "city,country_code" |
| units | standard, metric, imperial |
| appid | API key |

## Errors
Failures return JSON such as `{"cod": "404", "message": "city not found"}`.
The `message` is surfaced as the ProviderError message.

## Fields used for advisories
| Payload | Field | Unit (metric) |
|---------|-------|---------------|
| current | main.temp, main.humidity | °C, % |
| current | wind.speed | m/s |
| current | visibility | m (max 10000) |
| current | weather[0].id | condition code |
| current | rain.1h, rain.3h | mm |
| forecast | list[].rain.3h | mm |
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from agrisense.providers.base import (
    AuthenticationError,
    ProviderError,
    WeatherProvider,
    WeatherReport,
)

logger = logging.getLogger(__name__)


class OpenWeatherProvider(WeatherProvider):
    """Weather provider backed by the OpenWeatherMap 2.5 API.

    The forecast is optional for advisories: if only the forecast request
    fails, the report is returned without it.

    Example:
        ```python
        async with OpenWeatherProvider(api_key="...") as provider:
            report = await provider.get_weather("Nashik,IN")
        ```
    """

    name = "openweathermap"
    base_url = "https://api.openweathermap.org/data/2.5"
    requires_api_key = True

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        units: str = "metric",
        **kwargs,
    ):
        super().__init__(api_key=api_key, **kwargs)
        if base_url:
            self.base_url = base_url.rstrip("/")
        self.units = units

    def _error_message(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        message = body.get("message") if isinstance(body, dict) else None
        return message or f"API request failed: {response.status_code}"

    def _params(self, city: str) -> dict[str, str]:
        return {"q": city, "units": self.units, "appid": self.api_key or ""}

    async def get_current(self, city: str) -> dict:
        """Fetch the current-conditions payload."""
        response = await self._fetch(f"{self.base_url}/weather", params=self._params(city))
        return response.json()

    async def get_forecast(self, city: str) -> dict:
        """Fetch the 5-day / 3-hour forecast payload."""
        response = await self._fetch(f"{self.base_url}/forecast", params=self._params(city))
        return response.json()

    async def get_weather(self, city: str) -> WeatherReport:
        if self.requires_api_key and not self.api_key:
            raise AuthenticationError(
                "OpenWeatherMap API key is not configured", provider=self.name
            )

        current, forecast = await asyncio.gather(
            self.get_current(city),
            self.get_forecast(city),
            return_exceptions=True,
        )

        if isinstance(current, ProviderError):
            logger.error(
                f"Current weather request for {city!r} failed: "
                f"{current} (status {current.status_code})"
            )
            raise current
        if isinstance(current, httpx.HTTPError):
            logger.error(f"Current weather request for {city!r} failed: {current}")
            raise ProviderError(
                f"Weather service unavailable: {current}", provider=self.name
            ) from current
        if isinstance(current, BaseException):
            raise current

        if isinstance(forecast, (ProviderError, httpx.HTTPError)):
            logger.warning(
                f"Forecast request for {city!r} failed, continuing without it: {forecast}"
            )
            forecast = None
        elif isinstance(forecast, BaseException):
            raise forecast

        return WeatherReport(current=current, forecast=forecast)
