"""Pytest fixtures for the advisory service tests.

This module provides test fixtures that ensure:
1. No external API calls are made (OpenWeatherMap)
2. No real database connections in API tests
3. Isolated test environment with controlled configuration
"""

import os
from datetime import datetime, timezone
from typing import Any

import pytest

# Set test environment BEFORE importing application modules
os.environ.setdefault("OPENWEATHER_API_KEY", "test-openweather-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from fastapi.testclient import TestClient

from agrisense.api.app import create_app
from agrisense.api.dependencies import get_weather_provider
from agrisense.config import default_rules_path
from agrisense.database.connection import get_db_session
from agrisense.models.observation import Observation
from agrisense.models.rule import RuleTable
from agrisense.providers.base import ProviderError, WeatherProvider, WeatherReport
from agrisense.rules.engine import RuleEngine
from agrisense.rules.loader import parse_rule_table


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from agrisense.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Payload builders
# =============================================================================


def current_payload(
    temp: float = 24.0,
    humidity: float = 55,
    wind_speed: float = 2.0,
    visibility: float | None = 10000,
    weather_id: int = 800,
    rain: dict[str, float] | None = None,
    name: str = "Nashik",
    country: str = "IN",
) -> dict[str, Any]:
    """An OpenWeatherMap current-weather payload."""
    payload: dict[str, Any] = {
        "coord": {"lon": 73.79, "lat": 19.99},
        "weather": [
            {"id": weather_id, "main": "Clear", "description": "clear sky", "icon": "01d"}
        ],
        "main": {
            "temp": temp,
            "feels_like": temp + 1,
            "pressure": 1012,
            "humidity": humidity,
        },
        "wind": {"speed": wind_speed, "deg": 270},
        "dt": 1718452800,
        "sys": {"country": country},
        "name": name,
        "cod": 200,
    }
    if visibility is not None:
        payload["visibility"] = visibility
    if rain is not None:
        payload["rain"] = rain
    return payload


def forecast_payload(rain_per_slice: list[float | None], start: int = 1718452800) -> dict[str, Any]:
    """An OpenWeatherMap forecast payload, one slice per entry (None = no rain key)."""
    slices = []
    for i, rain in enumerate(rain_per_slice):
        item: dict[str, Any] = {
            "dt": start + i * 3 * 3600,
            "main": {"temp": 22.0 + i % 4, "humidity": 60},
            "weather": [{"id": 500 if rain else 800, "main": "Rain" if rain else "Clear"}],
        }
        if rain is not None:
            item["rain"] = {"3h": rain}
        slices.append(item)
    return {"cod": "200", "cnt": len(slices), "list": slices}


@pytest.fixture
def calm_observation() -> Observation:
    """Mild, dry, calm conditions without a forecast."""
    return Observation.from_payloads(current_payload())


@pytest.fixture
def stormy_observation() -> Observation:
    """Thunderstorm with strong wind and a wet forecast."""
    return Observation.from_payloads(
        current_payload(temp=27.0, humidity=90, wind_speed=15.0, weather_id=211),
        forecast_payload([8.0] * 16),
    )


# =============================================================================
# Rule fixtures
# =============================================================================


def rule_doc(
    rule_id: str,
    conditions: list[dict[str, Any]],
    severity: str = "warning",
    icon: str | None = None,
) -> dict[str, Any]:
    """A rule entry as it appears in a rule document."""
    doc: dict[str, Any] = {
        "id": rule_id,
        "severity": severity,
        "title": f"Title {rule_id}",
        "message": f"Message {rule_id}",
        "conditions": conditions,
    }
    if icon is not None:
        doc["icon"] = icon
    return doc


@pytest.fixture
def sample_rule_table() -> RuleTable:
    """A small rule table covering each severity."""
    return parse_rule_table(
        {
            "version": "test-1",
            "rules": [
                rule_doc(
                    "storm",
                    [{"var": "prob_thunderstorm", "operator": "eq", "value": 1.0}],
                    severity="danger",
                ),
                rule_doc(
                    "wind",
                    [{"var": "wind_kmph", "operator": "gt", "value": 30}],
                    severity="alert",
                ),
                rule_doc(
                    "humid",
                    [{"var": "humidity_pct", "operator": "between", "value": [80, 95]}],
                    severity="warning",
                    icon="Drop",
                ),
                rule_doc(
                    "wet",
                    [{"var": "rainfall_48h_mm", "operator": "gte", "value": 100}],
                    severity="info",
                ),
            ],
        }
    )


@pytest.fixture
def bundled_engine() -> RuleEngine:
    """Engine over the rule table shipped with the package."""
    return RuleEngine.from_file(default_rules_path())


# =============================================================================
# API fixtures
# =============================================================================


class FakeResult:
    def __init__(self, rows: list[Any]):
        self._rows = rows

    def scalars(self) -> "FakeResult":
        return self

    def all(self) -> list[Any]:
        return list(self._rows)


class FakeSession:
    """Stand-in for AsyncSession recording what routes do with it."""

    def __init__(
        self,
        rows: list[Any] | None = None,
        fail_commit: Exception | None = None,
        fail_rollback: Exception | None = None,
    ):
        self.rows = rows or []
        self.added: list[Any] = []
        self.commits = 0
        self.rollbacks = 0
        self.fail_commit = fail_commit
        self.fail_rollback = fail_rollback

    def add(self, obj: Any) -> None:
        self.added.append(obj)

    async def commit(self) -> None:
        if self.fail_commit is not None:
            raise self.fail_commit
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1
        if self.fail_rollback is not None:
            raise self.fail_rollback

    async def refresh(self, obj: Any) -> None:
        if getattr(obj, "created_at", None) is None:
            obj.created_at = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

    async def execute(self, statement: Any) -> FakeResult:
        return FakeResult(self.rows)


class FakeProvider(WeatherProvider):
    """Weather provider returning canned payloads."""

    name = "fake"
    base_url = "http://weather.invalid"

    def __init__(self, report: WeatherReport | None = None, error: ProviderError | None = None):
        super().__init__()
        self.report = report
        self.error = error
        self.requested: list[str] = []

    async def get_weather(self, city: str) -> WeatherReport:
        self.requested.append(city)
        if self.error is not None:
            raise self.error
        return self.report


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider(
        WeatherReport(
            current=current_payload(wind_speed=10.0),
            forecast=forecast_payload([1.0] * 8),
        )
    )


@pytest.fixture
def app(sample_rule_table: RuleTable, tmp_path):
    """Application over the sample rule table, with no database or network."""
    rules_file = tmp_path / "rules.json"
    rules_file.write_text(
        sample_rule_table.model_dump_json(by_alias=False), encoding="utf-8"
    )
    return create_app(RuleEngine(sample_rule_table, source=rules_file))


@pytest.fixture
def client(app, fake_provider: FakeProvider, fake_session: FakeSession) -> TestClient:
    """Test client with the provider and database session overridden."""

    async def _provider():
        yield fake_provider

    async def _session():
        yield fake_session

    app.dependency_overrides[get_weather_provider] = _provider
    app.dependency_overrides[get_db_session] = _session
    return TestClient(app)
