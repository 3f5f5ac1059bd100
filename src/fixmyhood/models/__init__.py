# src/fixmyhood/models/__init__.py
"""SQLAlchemy models for the FixMyHood application."""

from .badge import BadgeType, UserBadge
from .comment import Comment, CommentType, CommentVerification
from .flag import Flag, FlagContentType, FlagStatus
from .profile import FrameType, Profile
from .report import Follower, Report, ReportCategory, ReportStatus, ReportView

__all__ = [
    "BadgeType", "UserBadge",
    "Comment", "CommentType", "CommentVerification",
    "Flag", "FlagContentType", "FlagStatus",
    "FrameType", "Profile",
    "Follower", "Report", "ReportCategory", "ReportStatus", "ReportView",
]
