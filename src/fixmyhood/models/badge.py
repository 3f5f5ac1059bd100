# src/fixmyhood/models/badge.py
"""Achievement badges earned through activity."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from fixmyhood.db.session import Base
from fixmyhood.db.time import utcnow


class BadgeType(StrEnum):
    """Badge identifiers; each also unlocks the profile frame of the same name."""

    FIRST_REPORT = "first_report"
    HELPER = "helper"
    RESOLVER = "resolver"


class UserBadge(Base):
    """A badge held by a user.

    Rows are only inserted, never updated or revoked. The composite primary key
    makes repeated awards collapse into one row.
    """

    __tablename__ = "user_badges"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    badge_type: Mapped[str] = mapped_column(String(20), primary_key=True)
    earned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
