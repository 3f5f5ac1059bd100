"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .admin import (
    AdminCommentPatch,
    AdminPromoteRequest,
    AdminReportPatch,
    AdminUserPatch,
    DuplicateAssignRequest,
)
from .comment import CommentCreate, CommentResponse, VerificationResponse
from .flag import FlagCreate, FlagResolveRequest, FlagResponse
from .profile import (
    BadgeResponse,
    FrameUpdateRequest,
    ProfileResponse,
    PublicProfileResponse,
)
from .report import (
    DuplicateDraft,
    DuplicateMatch,
    ReportCreate,
    ReportDetailResponse,
    ReportResponse,
    ReportUpdate,
)

__all__ = [
    "AdminCommentPatch", "AdminPromoteRequest", "AdminReportPatch", "AdminUserPatch",
    "DuplicateAssignRequest",
    "CommentCreate", "CommentResponse", "VerificationResponse",
    "FlagCreate", "FlagResolveRequest", "FlagResponse",
    "BadgeResponse", "FrameUpdateRequest", "ProfileResponse", "PublicProfileResponse",
    "DuplicateDraft", "DuplicateMatch", "ReportCreate", "ReportDetailResponse", "ReportResponse", "ReportUpdate",
]
