"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fixmyhood.models.comment import CommentType


class CommentCreate(BaseModel):
    """Schema for posting a comment on a report."""

    content: str = Field(..., min_length=1, max_length=1000)
    comment_type: CommentType = CommentType.COMMENT
    image_url: str | None = Field(
        None,
        description="Photo evidence; required for progress and confirm_fix comments",
    )

    @field_validator("content")
    @classmethod
    def _strip_content(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Comment must not be blank")
        return stripped


class CommentResponse(BaseModel):
    """Comment with verification state relative to the viewer."""

    id: str
    report_id: str
    user_id: str
    content: str
    comment_type: str
    image_url: str | None
    is_hidden: bool
    created_at: datetime
    verification_count: int = 0
    user_verified: bool = False

    model_config = ConfigDict(from_attributes=True)


class VerificationResponse(BaseModel):
    """Result of verifying a fix."""

    comment_id: str
    verification_count: int
    author_bonus_awarded: bool
