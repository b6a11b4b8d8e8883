"""Weather observation models.

These mirror the OpenWeatherMap current-weather and 5-day/3-hour forecast
payloads closely enough to derive advisory facts from them. Fields the
advisory engine never reads are ignored on parse, and the raw payloads are
kept separately by the caller when they need to be echoed back.

## Source payloads

- Current: https://openweathermap.org/current
- Forecast: https://openweathermap.org/forecast5

## Units

Requests are made with `units=metric`, so temperature is in °C, wind speed
in m/s, visibility in metres and precipitation in millimetres.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class RainAmounts(BaseModel):
    """Precipitation volume for the last hour / last three hours."""

    model_config = ConfigDict(populate_by_name=True)

    one_hour_mm: float | None = Field(default=None, alias="1h")
    three_hour_mm: float | None = Field(default=None, alias="3h")


class MainReadings(BaseModel):
    """Temperature, humidity and pressure block of the current payload."""

    temp: float = Field(..., description="Temperature in °C")
    humidity: float = Field(..., ge=0, le=100, description="Relative humidity %")
    pressure: float | None = Field(default=None, description="Pressure in hPa")
    feels_like: float | None = Field(default=None, description="Feels-like °C")


class WindReading(BaseModel):
    """Wind block of the current payload."""

    speed: float = Field(..., ge=0, description="Wind speed in m/s")
    deg: float | None = Field(default=None, description="Wind direction in degrees")
    gust: float | None = Field(default=None, description="Wind gust in m/s")


class WeatherCode(BaseModel):
    """A weather condition entry.

    The numeric `id` groups conditions by hundreds: 2xx thunderstorm,
    3xx drizzle, 5xx rain, 6xx snow, 7xx atmosphere, 800 clear, 80x clouds.
    """

    id: int
    main: str | None = None
    description: str | None = None
    icon: str | None = None

    def is_thunderstorm(self) -> bool:
        return 200 <= self.id < 300


class SystemInfo(BaseModel):
    country: str | None = None
    sunrise: int | None = None
    sunset: int | None = None


class CurrentConditions(BaseModel):
    """Current weather for a single location."""

    main: MainReadings
    wind: WindReading
    visibility: float | None = Field(default=None, ge=0, description="Visibility in m")
    weather: list[WeatherCode] = Field(default_factory=list)
    rain: RainAmounts | None = None
    name: str | None = Field(default=None, description="City name")
    sys: SystemInfo | None = None
    dt: int | None = Field(default=None, description="Observation time, epoch seconds")

    @property
    def primary_condition(self) -> WeatherCode | None:
        """The first (primary) weather condition, if any."""
        return self.weather[0] if self.weather else None

    @property
    def country(self) -> str | None:
        return self.sys.country if self.sys else None


class ForecastReadings(BaseModel):
    temp: float | None = None
    humidity: float | None = None


class ForecastSlice(BaseModel):
    """One 3-hour forecast step."""

    dt: int | None = Field(default=None, description="Slice start, epoch seconds")
    main: ForecastReadings | None = None
    rain: RainAmounts | None = None

    @property
    def rain_3h_mm(self) -> float:
        """Precipitation for this slice, 0 when not reported."""
        if self.rain is None:
            return 0.0
        return self.rain.three_hour_mm or 0.0


class ForecastSeries(BaseModel):
    """Forecast payload: an ordered list of 3-hour slices.

    `slices` is None when the payload carries no `list` at all, which is
    different from an empty list.
    """

    model_config = ConfigDict(populate_by_name=True)

    slices: list[ForecastSlice] | None = Field(default=None, alias="list")


class Observation(BaseModel):
    """Current conditions plus an optional forecast for one location."""

    current: CurrentConditions
    forecast: ForecastSeries | None = None

    @classmethod
    def from_payloads(
        cls,
        current: dict[str, Any],
        forecast: dict[str, Any] | None = None,
    ) -> Observation:
        """Parse raw provider payloads into an Observation.

        The current conditions must parse. A forecast that does not is
        dropped, so advisories fall back to current conditions only.

        Raises:
            ValidationError: If the current-conditions payload is incomplete
        """
        parsed_forecast = None
        if forecast is not None:
            try:
                parsed_forecast = ForecastSeries.model_validate(forecast)
            except ValidationError as e:
                logger.warning(
                    f"Ignoring unparseable forecast ({e.error_count()} validation error(s))"
                )
        return cls.model_validate({"current": current, "forecast": parsed_forecast})
