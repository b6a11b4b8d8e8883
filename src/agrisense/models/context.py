"""Evaluation context: the flat fact vocabulary rules are written against."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EvaluationContext(BaseModel):
    """Named facts derived from one observation.

    Instances are frozen. Rules address facts by field name, e.g. a
    condition on `wind_kmph` reads `context.as_mapping()["wind_kmph"]`.
    """

    model_config = ConfigDict(frozen=True)

    temperature_c: float = Field(..., description="Current temperature in °C")
    humidity_pct: float = Field(..., description="Relative humidity (0-100)")
    wind_kmph: float = Field(..., description="Wind speed in km/h")
    rainfall_mm: float = Field(..., description="Expected rainfall over ~24h in mm")
    rainfall_48h_mm: float = Field(..., description="Expected rainfall over ~48h in mm")
    visibility_km: float = Field(..., description="Visibility in km")
    prob_thunderstorm: float = Field(..., description="1.0 during a thunderstorm, else 0.0")
    soil_moisture_pct: float = Field(default=50, description="Soil moisture (no live source)")
    consecutive_rain_days: int = Field(default=0, description="Rain days in a row")
    rain_expected_within_hours: int = Field(
        ..., description="0 when rain is already expected, else 24"
    )
    days_to_harvest: int = Field(default=30, description="Days until harvest")

    def as_mapping(self) -> Mapping[str, Any]:
        """Read-only name -> value view of the facts."""
        return MappingProxyType(self.model_dump())

    @classmethod
    def fact_names(cls) -> tuple[str, ...]:
        """The fixed fact vocabulary."""
        return tuple(cls.model_fields)
