"""Advisory models returned to the presentation layer."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PresentationType(str, Enum):
    """Display style of an advisory (colour scheme in the UI)."""

    DANGER = "danger"
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"


class Advisory(BaseModel):
    """A single user-facing farming advisory."""

    model_config = ConfigDict(frozen=True)

    type: PresentationType = Field(..., description="How the advisory is styled")
    title: str = Field(..., description="Short title")
    message: str = Field(..., description="Full advisory text")
    icon: str = Field(..., description="Icon name understood by the UI")
