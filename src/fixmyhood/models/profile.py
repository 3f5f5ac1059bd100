# src/fixmyhood/models/profile.py
"""SQLAlchemy model for user profiles."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fixmyhood.db.session import Base
from fixmyhood.db.time import utcnow


class FrameType(StrEnum):
    """Cosmetic avatar frames; every frame except ``default`` is badge-gated."""

    DEFAULT = "default"
    FIRST_REPORT = "first_report"
    HELPER = "helper"
    RESOLVER = "resolver"


class Profile(Base):
    """Public profile keyed by the identity provider's user id."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("points >= 0", name="ck_profiles_points_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Only ever increased by awards.
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_banned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    active_frame: Mapped[str] = mapped_column(
        String(20), nullable=False, default=FrameType.DEFAULT.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
