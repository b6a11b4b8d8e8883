"""Search history routes."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agrisense.config import get_settings
from agrisense.database.connection import get_db_session
from agrisense.database.models import SearchHistory

router = APIRouter()


class SearchHistoryResponse(BaseModel):
    """A past weather lookup."""

    model_config = ConfigDict(from_attributes=True)

    city: str
    country: str | None
    temp: float
    condition: str
    search_date: datetime


@router.get("", response_model=list[SearchHistoryResponse])
async def get_history(
    db: AsyncSession = Depends(get_db_session),
) -> list[SearchHistoryResponse]:
    """Most recent searches, newest first."""
    result = await db.execute(
        select(SearchHistory)
        .order_by(SearchHistory.search_date.desc())
        .limit(get_settings().history_limit)
    )
    return [SearchHistoryResponse.model_validate(row) for row in result.scalars().all()]
