"""Profile-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from fixmyhood.models.profile import FrameType


class BadgeResponse(BaseModel):
    badge_type: str
    earned_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(BaseModel):
    """The authenticated user's own profile."""

    id: str
    display_name: str
    avatar_url: str | None
    points: int
    is_admin: bool
    is_banned: bool
    active_frame: str
    created_at: datetime
    badges: list[BadgeResponse] = Field(default_factory=list)
    unlocked_frames: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class PublicProfileResponse(BaseModel):
    """Profile fields visible to other users."""

    id: str
    display_name: str
    avatar_url: str | None
    points: int
    active_frame: str
    badges: list[BadgeResponse] = Field(default_factory=list)
    report_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class FrameUpdateRequest(BaseModel):
    """Schema for choosing the active profile frame."""

    frame: FrameType
