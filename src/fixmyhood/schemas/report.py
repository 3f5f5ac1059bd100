# src/fixmyhood/schemas/report.py
"""Report-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from fixmyhood.models.report import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH, ReportCategory


class ReportCreate(BaseModel):
    """Schema for submitting a new report."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(..., min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    category: ReportCategory
    photo_url: str | None = Field(None, description="URL returned by the upload endpoint")
    location_text: str | None = Field(None, max_length=200)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)

    @field_validator("title", "description")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Field must not be blank")
        return stripped

    @model_validator(mode="after")
    def _coordinates_together(self) -> "ReportCreate":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self


class ReportUpdate(BaseModel):
    """Owner edits; omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(None, min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    category: ReportCategory | None = None
    photo_url: str | None = None
    remove_photo: bool = Field(False, description="Drop the current photo")

    @field_validator("title", "description")
    @classmethod
    def _strip_optional(cls, value: str | None) -> str | None:
        if value is None:
            return value
        stripped = value.strip()
        if not stripped:
            raise ValueError("Field must not be blank")
        return stripped


class ReportResponse(BaseModel):
    """Schema for report information returned by the API."""

    id: str
    creator_id: str
    title: str
    description: str
    category: str
    status: str
    photo_url: str | None
    location_text: str | None
    latitude: float | None
    longitude: float | None
    is_hidden: bool
    comments_locked: bool
    duplicate_of: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReportDetailResponse(ReportResponse):
    """Report plus engagement counters for the detail view."""

    followers_count: int = 0
    views_count: int = 0
    is_following: bool = False
    has_verified_fix: bool = False


class DuplicateMatch(BaseModel):
    """A likely duplicate surfaced before a report is submitted."""

    id: str
    title: str
    status: str
    category: str
    distance: str | None = None

    model_config = ConfigDict(from_attributes=True, frozen=True)


class DuplicateDraft(BaseModel):
    """Draft fields streamed by clients while a report is being written."""

    title: str = ""
    category: str = ""
    latitude: float | None = None
    longitude: float | None = None
