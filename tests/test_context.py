"""Tests for building the evaluation context from observations."""

import math

import pytest

from agrisense.models.context import EvaluationContext
from agrisense.models.observation import Observation
from agrisense.rules.context import build_context

from conftest import current_payload, forecast_payload


EXPECTED_KEYS = {
    "temperature_c",
    "humidity_pct",
    "wind_kmph",
    "rainfall_mm",
    "rainfall_48h_mm",
    "visibility_km",
    "prob_thunderstorm",
    "soil_moisture_pct",
    "consecutive_rain_days",
    "rain_expected_within_hours",
    "days_to_harvest",
}


def context_for(current: dict, forecast: dict | None = None) -> EvaluationContext:
    return build_context(Observation.from_payloads(current, forecast))


class TestVocabulary:
    """The context always carries the full fact vocabulary."""

    def test_fact_names(self):
        """Test the model declares exactly the eleven facts."""
        assert set(EvaluationContext.fact_names()) == EXPECTED_KEYS

    @pytest.mark.parametrize(
        "current,forecast",
        [
            (current_payload(), None),
            (current_payload(visibility=None, rain=None), None),
            (current_payload(rain={"1h": 2.5}), forecast_payload([])),
            (current_payload(weather_id=211), forecast_payload([None] * 20)),
            (current_payload(), {"cod": "200"}),
        ],
    )
    def test_all_keys_present_and_finite(self, current, forecast):
        """Test every key is present and numeric keys are never NaN."""
        facts = context_for(current, forecast).as_mapping()
        assert set(facts) == EXPECTED_KEYS
        for key, value in facts.items():
            assert value is not None, key
            assert not math.isnan(value), key

    def test_context_is_frozen(self, calm_observation: Observation):
        """Test the context cannot be modified after construction."""
        context = build_context(calm_observation)
        with pytest.raises(Exception):
            context.temperature_c = 40.0
        with pytest.raises(TypeError):
            context.as_mapping()["temperature_c"] = 40.0


class TestCurrentReadings:
    def test_temperature_and_humidity(self):
        context = context_for(current_payload(temp=31.5, humidity=72))
        assert context.temperature_c == 31.5
        assert context.humidity_pct == 72

    def test_wind_converted_to_kmph(self):
        """Test wind.speed=10 m/s becomes 36 km/h."""
        context = context_for(current_payload(wind_speed=10))
        assert context.wind_kmph == pytest.approx(36.0)

    def test_visibility_in_km(self):
        context = context_for(current_payload(visibility=2500))
        assert context.visibility_km == 2.5

    def test_missing_visibility_uses_ceiling(self):
        context = context_for(current_payload(visibility=None))
        assert context.visibility_km == 10.0

    @pytest.mark.parametrize("weather_id", [200, 211, 232, 299])
    def test_thunderstorm_codes(self, weather_id):
        """Test 2xx codes set the thunderstorm probability."""
        context = context_for(current_payload(weather_id=weather_id))
        assert context.prob_thunderstorm == 1.0

    @pytest.mark.parametrize("weather_id", [199, 300, 500, 800, 804])
    def test_non_thunderstorm_codes(self, weather_id):
        context = context_for(current_payload(weather_id=weather_id))
        assert context.prob_thunderstorm == 0.0

    def test_empty_weather_list(self):
        current = current_payload()
        current["weather"] = []
        assert context_for(current).prob_thunderstorm == 0.0

    def test_constants(self, calm_observation: Observation):
        """Test facts without a live source carry their fixed values."""
        context = build_context(calm_observation)
        assert context.soil_moisture_pct == 50
        assert context.consecutive_rain_days == 0
        assert context.days_to_harvest == 30


class TestRainfall:
    def test_forecast_sums_first_eight_slices(self):
        """Test 8 slices of 1 mm give 8 mm for both horizons."""
        context = context_for(current_payload(), forecast_payload([1.0] * 8))
        assert context.rainfall_mm == 8
        assert context.rainfall_48h_mm == 8

    def test_forecast_horizons(self):
        """Test 24h uses slices 0-7 and 48h uses slices 0-15."""
        rain = [1.0] * 8 + [2.0] * 8 + [50.0] * 4
        context = context_for(current_payload(), forecast_payload(rain))
        assert context.rainfall_mm == 8
        assert context.rainfall_48h_mm == 24

    def test_forecast_slices_without_rain_count_zero(self):
        rain = [None, 2.0, None, 0.5]
        context = context_for(current_payload(), forecast_payload(rain))
        assert context.rainfall_mm == 2.5

    def test_forecast_takes_precedence_over_current_rain(self):
        """Test current rain is ignored when a forecast list is present."""
        context = context_for(
            current_payload(rain={"1h": 4.0}), forecast_payload([None] * 8)
        )
        assert context.rainfall_mm == 0
        assert context.rain_expected_within_hours == 24

    def test_empty_forecast_list_is_still_a_forecast(self):
        context = context_for(current_payload(rain={"1h": 4.0}), forecast_payload([]))
        assert context.rainfall_mm == 0

    def test_current_rain_without_forecast(self):
        """Test the 1h amount is used when there is no forecast."""
        context = context_for(current_payload(rain={"1h": 1.2, "3h": 3.0}))
        assert context.rainfall_mm == 1.2
        assert context.rainfall_48h_mm == 0

    def test_current_three_hour_rain_fallback(self):
        context = context_for(current_payload(rain={"3h": 3.0}))
        assert context.rainfall_mm == 3.0

    def test_forecast_without_list_uses_current(self):
        context = context_for(current_payload(rain={"1h": 0.7}), {"cod": "200"})
        assert context.rainfall_mm == 0.7
        assert context.rainfall_48h_mm == 0

    def test_no_rain_anywhere(self, calm_observation: Observation):
        context = build_context(calm_observation)
        assert context.rainfall_mm == 0
        assert context.rainfall_48h_mm == 0

    def test_rain_expected_now(self):
        context = context_for(current_payload(rain={"1h": 0.2}))
        assert context.rain_expected_within_hours == 0

    def test_rain_not_expected(self, calm_observation: Observation):
        assert build_context(calm_observation).rain_expected_within_hours == 24
