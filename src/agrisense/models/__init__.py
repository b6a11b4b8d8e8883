"""Domain models for farming advisories."""

from agrisense.models.observation import (
    CurrentConditions,
    ForecastSeries,
    ForecastSlice,
    MainReadings,
    Observation,
    RainAmounts,
    WeatherCode,
    WindReading,
)
from agrisense.models.context import EvaluationContext
from agrisense.models.rule import (
    Condition,
    Operator,
    Rule,
    RuleTable,
    Severity,
)
from agrisense.models.advisory import Advisory, PresentationType

__all__ = [
    # Observation
    "CurrentConditions",
    "ForecastSeries",
    "ForecastSlice",
    "MainReadings",
    "Observation",
    "RainAmounts",
    "WeatherCode",
    "WindReading",
    # Context
    "EvaluationContext",
    # Rules
    "Condition",
    "Operator",
    "Rule",
    "RuleTable",
    "Severity",
    # Advisory
    "Advisory",
    "PresentationType",
]
