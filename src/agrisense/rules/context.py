"""Context builder: turns a weather observation into advisory facts.

## Derivations

| Fact | Source |
|------|--------|
| temperature_c | current `main.temp` |
| humidity_pct | current `main.humidity` |
| wind_kmph | current `wind.speed` (m/s) × 3.6 |
| rainfall_mm | sum of `rain.3h` over the next 8 forecast slices (~24h); without a forecast, current `rain.1h` or `rain.3h` |
| rainfall_48h_mm | sum of `rain.3h` over the next 16 forecast slices (~48h); 0 without a forecast |
| visibility_km | current `visibility` ÷ 1000 |
| prob_thunderstorm | 1.0 when the primary weather code is 2xx |
| soil_moisture_pct | 50, no live source |
| consecutive_rain_days | 0, not derivable from one snapshot |
| rain_expected_within_hours | 0 if rainfall_mm > 0 else 24 |
| days_to_harvest | 30, no crop calendar |
"""

from __future__ import annotations

from agrisense.models.context import EvaluationContext
from agrisense.models.observation import CurrentConditions, ForecastSeries, Observation

MS_TO_KMPH = 3.6

# Forecast slices are 3 hours apart
SLICES_24H = 8
SLICES_48H = 16

# OpenWeatherMap reports visibility up to a 10 km ceiling
DEFAULT_VISIBILITY_M = 10_000.0

DEFAULT_SOIL_MOISTURE_PCT = 50
DEFAULT_CONSECUTIVE_RAIN_DAYS = 0
DEFAULT_DAYS_TO_HARVEST = 30
RAIN_NOT_EXPECTED_HOURS = 24


def forecast_rainfall(forecast: ForecastSeries, slices: int) -> float:
    """Total precipitation over the first `slices` forecast steps."""
    return sum(s.rain_3h_mm for s in (forecast.slices or [])[:slices])


def current_rainfall(current: CurrentConditions) -> float:
    """Precipitation reported with current conditions, 0 when absent."""
    if current.rain is None:
        return 0.0
    return current.rain.one_hour_mm or current.rain.three_hour_mm or 0.0


def build_context(observation: Observation) -> EvaluationContext:
    """Derive the evaluation context for an observation.

    Args:
        observation: Current conditions plus optional forecast

    Returns:
        EvaluationContext with every fact populated
    """
    current = observation.current
    forecast = observation.forecast
    has_forecast = forecast is not None and forecast.slices is not None

    if has_forecast:
        rainfall_mm = forecast_rainfall(forecast, SLICES_24H)
        rainfall_48h_mm = forecast_rainfall(forecast, SLICES_48H)
    else:
        rainfall_mm = current_rainfall(current)
        rainfall_48h_mm = 0.0

    visibility_m = (
        current.visibility if current.visibility is not None else DEFAULT_VISIBILITY_M
    )
    primary = current.primary_condition
    thunderstorm = primary is not None and primary.is_thunderstorm()

    return EvaluationContext(
        temperature_c=current.main.temp,
        humidity_pct=current.main.humidity,
        wind_kmph=current.wind.speed * MS_TO_KMPH,
        rainfall_mm=rainfall_mm,
        rainfall_48h_mm=rainfall_48h_mm,
        visibility_km=visibility_m / 1000,
        prob_thunderstorm=1.0 if thunderstorm else 0.0,
        soil_moisture_pct=DEFAULT_SOIL_MOISTURE_PCT,
        consecutive_rain_days=DEFAULT_CONSECUTIVE_RAIN_DAYS,
        rain_expected_within_hours=0 if rainfall_mm > 0 else RAIN_NOT_EXPECTED_HOURS,
        days_to_harvest=DEFAULT_DAYS_TO_HARVEST,
    )
