"""Alert subscriber routes.

Farmers sign up with a name and phone number to receive weather alerts.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agrisense.database.connection import get_db_session
from agrisense.database.models import AlertSubscriber

router = APIRouter()


class SubscriberCreate(BaseModel):
    """Sign-up request."""

    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., pattern=r"^\+?[0-9][0-9 \-]{6,30}$")


class SubscriberResponse(BaseModel):
    """A registered subscriber."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    phone: str
    created_at: datetime | None = None


@router.post("", response_model=SubscriberResponse, status_code=status.HTTP_201_CREATED)
async def create_subscriber(
    data: SubscriberCreate,
    db: AsyncSession = Depends(get_db_session),
) -> SubscriberResponse:
    """Register a phone number for weather alerts."""
    subscriber = AlertSubscriber(
        id=uuid.uuid4(), name=data.name.strip(), phone=data.phone.strip()
    )
    db.add(subscriber)
    await db.commit()
    await db.refresh(subscriber)
    return SubscriberResponse.model_validate(subscriber)


@router.get("", response_model=list[SubscriberResponse])
async def list_subscribers(
    db: AsyncSession = Depends(get_db_session),
    skip: int = 0,
    limit: int = 50,
) -> list[SubscriberResponse]:
    """List subscribers, oldest first."""
    result = await db.execute(
        select(AlertSubscriber)
        .order_by(AlertSubscriber.created_at)
        .offset(skip)
        .limit(limit)
    )
    return [SubscriberResponse.model_validate(s) for s in result.scalars().all()]
