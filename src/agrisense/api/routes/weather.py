"""Weather and advisory routes.

`GET /api/weather?city=Nashik` fetches current conditions and the forecast,
evaluates the advisory rules and records the lookup in the search history.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agrisense.api.dependencies import get_rule_engine, get_weather_provider
from agrisense.database.connection import get_db_session
from agrisense.database.models import SearchHistory
from agrisense.models.advisory import Advisory
from agrisense.models.observation import Observation
from agrisense.providers.base import (
    AuthenticationError,
    ProviderError,
    WeatherProvider,
    WeatherReport,
)
from agrisense.rules.engine import RuleEngine

logger = logging.getLogger(__name__)

router = APIRouter()


class WeatherResponse(BaseModel):
    """Raw provider payloads plus the advisories derived from them."""

    weather: dict[str, Any]
    forecast: dict[str, Any] | None
    advisories: list[Advisory]


async def record_search(
    db: AsyncSession, report: WeatherReport, observation: Observation
) -> None:
    """Store the lookup in the search history.

    History is best effort: a database failure, including an unreachable
    server (asyncpg raises a plain OSError for that), is logged and does not
    fail the weather response.
    """
    current = observation.current
    primary = current.primary_condition
    entry = SearchHistory(
        city=current.name or "Unknown",
        country=current.country,
        temp=current.main.temp,
        condition=(primary.main if primary and primary.main else "Unknown"),
    )
    try:
        db.add(entry)
        await db.commit()
    except (SQLAlchemyError, OSError):
        logger.warning(f"Failed to record search for {report.city!r}", exc_info=True)
        try:
            await db.rollback()
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Rollback after failed history write failed: {e}")


@router.get("", response_model=WeatherResponse)
async def get_weather(
    city: str | None = None,
    engine: RuleEngine = Depends(get_rule_engine),
    provider: WeatherProvider = Depends(get_weather_provider),
    db: AsyncSession = Depends(get_db_session),
) -> WeatherResponse:
    """Get weather, forecast and farming advisories for a city."""
    if city is None or not city.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="City parameter is required",
        )

    try:
        report = await provider.get_weather(city.strip())
    except AuthenticationError as e:
        logger.error(f"Weather provider rejected credentials: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Weather service is not configured",
        )
    except ProviderError as e:
        raise HTTPException(
            status_code=(
                status.HTTP_404_NOT_FOUND if e.is_not_found else status.HTTP_502_BAD_GATEWAY
            ),
            detail=str(e),
        )

    try:
        observation = report.to_observation()
    except ValidationError as e:
        logger.error(f"Malformed weather payload for {city!r}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Weather service returned incomplete data",
        )

    advisories = engine.generate_advisories(observation)
    await record_search(db, report, observation)

    return WeatherResponse(
        weather=report.current,
        forecast=report.forecast,
        advisories=advisories,
    )
