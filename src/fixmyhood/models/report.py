# src/fixmyhood/models/report.py
"""SQLAlchemy models for civic issue reports and per-user report state."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fixmyhood.db.ids import new_id
from fixmyhood.db.session import Base
from fixmyhood.db.time import utcnow

if TYPE_CHECKING:
    from .comment import Comment

TITLE_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 300


class ReportCategory(StrEnum):
    """Kinds of civic problem a report can describe."""

    INFRASTRUCTURE = "infrastructure"
    SAFETY = "safety"
    CLEANLINESS = "cleanliness"
    ENVIRONMENT = "environment"
    OTHER = "other"


class ReportStatus(StrEnum):
    """Report lifecycle, ordered from first to last stage."""

    OPEN = "open"
    ACKNOWLEDGED = "acknowledged"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"

    @property
    def rank(self) -> int:
        """Position of the status in the forward lifecycle."""
        return list(ReportStatus).index(self)


class Report(Base):
    """A user-submitted civic issue."""

    __tablename__ = "reports"
    __table_args__ = (
        CheckConstraint(
            "category IN ('infrastructure', 'safety', 'cleanliness', 'environment', 'other')",
            name="ck_reports_category",
        ),
        CheckConstraint(
            "status IN ('open', 'acknowledged', 'in_progress', 'closed')",
            name="ck_reports_status",
        ),
        Index("ix_reports_category_created_at", "category", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    creator_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[str] = mapped_column(String(DESCRIPTION_MAX_LENGTH), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ReportStatus.OPEN.value
    )
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    location_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    comments_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Weak back-reference to the canonical report; the links form a forest.
    duplicate_of: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("reports.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    comments: Mapped[list[Comment]] = relationship(
        "Comment",
        back_populates="report",
        cascade="all, delete-orphan",
    )
    followers: Mapped[list[Follower]] = relationship(
        "Follower",
        cascade="all, delete-orphan",
    )
    views: Mapped[list[ReportView]] = relationship(
        "ReportView",
        cascade="all, delete-orphan",
    )


class Follower(Base):
    """A user following updates on a report."""

    __tablename__ = "followers"

    report_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("reports.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class ReportView(Base):
    """Last time a user opened a report; one row per (report, user)."""

    __tablename__ = "report_views"

    report_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("reports.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
