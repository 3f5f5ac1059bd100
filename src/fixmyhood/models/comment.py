# src/fixmyhood/models/comment.py
"""Models for report comments and peer verification of fixes."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fixmyhood.db.ids import new_id
from fixmyhood.db.session import Base
from fixmyhood.db.time import utcnow

if TYPE_CHECKING:
    from .report import Report


class CommentType(StrEnum):
    """Plain discussion, progress evidence, or a claimed fix."""

    COMMENT = "comment"
    PROGRESS = "progress"
    CONFIRM_FIX = "confirm_fix"


class Comment(Base):
    """A comment posted on a report."""

    __tablename__ = "comments"
    __table_args__ = (
        CheckConstraint(
            "comment_type IN ('comment', 'progress', 'confirm_fix')",
            name="ck_comments_comment_type",
        ),
        Index("ix_comments_user_id_comment_type", "user_id", "comment_type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    report_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("reports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    comment_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CommentType.COMMENT.value
    )
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Set once when the author has been paid the verified-fix bonus.
    fix_bonus_awarded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    report: Mapped[Report] = relationship("Report", back_populates="comments")
    verifications: Mapped[list[CommentVerification]] = relationship(
        "CommentVerification",
        cascade="all, delete-orphan",
    )


class CommentVerification(Base):
    """One user's endorsement of a confirm_fix comment.

    The composite primary key prevents a user verifying the same comment twice.
    """

    __tablename__ = "comment_verifications"

    comment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("comments.id", ondelete="CASCADE"),
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
