# src/fixmyhood/models/flag.py
"""Models tracking user-submitted content flags."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fixmyhood.db.ids import new_id
from fixmyhood.db.session import Base
from fixmyhood.db.time import utcnow


class FlagContentType(StrEnum):
    REPORT = "report"
    COMMENT = "comment"


class FlagStatus(StrEnum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    DISMISSED = "dismissed"


class Flag(Base):
    """A request from a user for an administrator to review some content."""

    __tablename__ = "flags"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    reporter_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Polymorphic target; no foreign key because it points at either table.
    content_type: Mapped[str] = mapped_column(String(10), nullable=False)
    content_id: Mapped[str] = mapped_column(String(36), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=FlagStatus.PENDING.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
