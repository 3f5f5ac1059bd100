"""Data access helpers wrapping the SQLAlchemy session."""

from .badge_repo import BadgeRepository
from .comment_repo import CommentRepository
from .profile_repo import ProfileRepository
from .report_repo import ReportRepository

__all__ = [
    "BadgeRepository",
    "CommentRepository",
    "ProfileRepository",
    "ReportRepository",
]
