"""FastAPI dependencies shared by the API routes.

## Usage

```python
from fastapi import Depends
from agrisense.api.dependencies import get_rule_engine, get_weather_provider

@router.get("/weather")
async def weather(
    engine: RuleEngine = Depends(get_rule_engine),
    provider: WeatherProvider = Depends(get_weather_provider),
):
    ...
```

Tests replace these through `app.dependency_overrides`.
"""

from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Request

from agrisense.config import get_settings
from agrisense.providers.base import WeatherProvider
from agrisense.providers.openweather import OpenWeatherProvider
from agrisense.rules.engine import RuleEngine


def get_rule_engine(request: Request) -> RuleEngine:
    """The rule engine created with the application."""
    return request.app.state.rule_engine


async def get_weather_provider() -> AsyncGenerator[WeatherProvider, None]:
    """An OpenWeatherMap client, closed after the request."""
    settings = get_settings()
    async with OpenWeatherProvider(
        api_key=settings.openweather_api_key,
        base_url=settings.openweather_base_url,
        units=settings.openweather_units,
        timeout=settings.provider_timeout_seconds,
    ) as provider:
        yield provider
