"""Flag-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from fixmyhood.models.flag import FlagContentType


class FlagCreate(BaseModel):
    """Schema for flagging a report or comment."""

    content_type: FlagContentType
    content_id: str
    reason: str = Field(..., min_length=1, max_length=500)


class FlagResponse(BaseModel):
    id: str
    reporter_id: str
    content_type: str
    content_id: str
    reason: str
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FlagResolveRequest(BaseModel):
    """Dismiss a flag, or hide the flagged content and mark the flag reviewed."""

    action: Literal["dismiss", "hide"]
