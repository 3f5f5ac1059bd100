"""Administrator request schemas."""

from pydantic import BaseModel, Field

from fixmyhood.models.report import ReportStatus


class AdminPromoteRequest(BaseModel):
    """Secret code that grants admin rights to the caller."""

    code: str = Field(..., min_length=1)


class DuplicateAssignRequest(BaseModel):
    """Mark a report as a duplicate of ``original_id``."""

    original_id: str = Field(..., min_length=1)


class AdminReportPatch(BaseModel):
    """Moderation toggles on a report; ``status`` bypasses the forward-only rule."""

    is_hidden: bool | None = None
    comments_locked: bool | None = None
    status: ReportStatus | None = None


class AdminCommentPatch(BaseModel):
    is_hidden: bool


class AdminUserPatch(BaseModel):
    is_banned: bool | None = None
    is_admin: bool | None = None
