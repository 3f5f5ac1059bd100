"""Data access helpers for comments and fix verifications."""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from fixmyhood.db.time import utcnow
from fixmyhood.models.comment import Comment, CommentType, CommentVerification
from fixmyhood.repositories.upsert import insert_ignore_conflicts

__all__ = ["CommentRepository"]


class CommentRepository:
    """Thin wrapper around database access for comments."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, comment_id: str) -> Comment | None:
        """Return a comment by identifier."""
        return self.session.get(Comment, comment_id)

    def list_for_report(self, report_id: str, *, include_hidden: bool = False) -> list[Comment]:
        """Return comments on a report, oldest first."""
        stmt = select(Comment).where(Comment.report_id == report_id)
        if not include_hidden:
            stmt = stmt.where(Comment.is_hidden.is_(False))
        stmt = stmt.order_by(Comment.created_at)
        return list(self.session.execute(stmt).scalars())

    def create(
        self,
        *,
        report_id: str,
        user_id: str,
        content: str,
        comment_type: str,
        image_url: str | None,
    ) -> Comment:
        """Insert a new comment and return the persisted ORM instance."""
        comment = Comment(
            report_id=report_id,
            user_id=user_id,
            content=content,
            comment_type=comment_type,
            image_url=image_url,
        )
        self.session.add(comment)
        self.session.flush()
        return comment

    def count_by_user(self, user_id: str) -> int:
        """Return how many comments the user has authored, of any type."""
        return int(
            self.session.scalar(
                select(func.count()).select_from(Comment).where(Comment.user_id == user_id)
            )
            or 0
        )

    def confirm_fix_ids_for_user(self, user_id: str) -> list[str]:
        """Return ids of the user's own confirm_fix comments."""
        result = self.session.execute(
            select(Comment.id).where(
                Comment.user_id == user_id,
                Comment.comment_type == CommentType.CONFIRM_FIX.value,
            )
        )
        return list(result.scalars())

    def report_has_progress(self, report_id: str) -> bool:
        """Return True if a progress update has been posted on the report."""
        stmt = (
            select(Comment.id)
            .where(
                Comment.report_id == report_id,
                Comment.comment_type == CommentType.PROGRESS.value,
            )
            .limit(1)
        )
        return self.session.execute(stmt).first() is not None

    # --- Verifications --------------------------------------------------------------
    def verification_counts(self, comment_ids: Sequence[str]) -> dict[str, int]:
        """Return verification counts for exactly ``comment_ids`` in a single query.

        Comments without verifications are absent from the result.
        """
        if not comment_ids:
            return {}
        result = self.session.execute(
            select(CommentVerification.comment_id, func.count())
            .where(CommentVerification.comment_id.in_(list(comment_ids)))
            .group_by(CommentVerification.comment_id)
        )
        return {comment_id: int(count) for comment_id, count in result.all()}

    def verified_by_user(self, comment_ids: Sequence[str], user_id: str) -> set[str]:
        """Return the subset of ``comment_ids`` the user has verified."""
        if not comment_ids:
            return set()
        result = self.session.execute(
            select(CommentVerification.comment_id).where(
                CommentVerification.comment_id.in_(list(comment_ids)),
                CommentVerification.user_id == user_id,
            )
        )
        return set(result.scalars())

    def add_verification(self, comment_id: str, user_id: str) -> bool:
        """Record a verification; returns False if the user already verified the comment."""
        inserted = insert_ignore_conflicts(
            self.session,
            CommentVerification.__table__,
            [{"comment_id": comment_id, "user_id": user_id, "created_at": utcnow()}],
            ("comment_id", "user_id"),
        )
        return inserted > 0

    def verification_count(self, comment_id: str) -> int:
        return self.verification_counts([comment_id]).get(comment_id, 0)

    def claim_fix_bonus(self, comment_id: str) -> bool:
        """Mark the verified-fix bonus as paid; True only for the first caller.

        The conditional UPDATE is the claim, so two concurrent verifications
        cannot both pay the author.
        """
        result = self.session.execute(
            update(Comment)
            .where(Comment.id == comment_id, Comment.fix_bonus_awarded.is_(False))
            .values(fix_bonus_awarded=True)
            .execution_options(synchronize_session="fetch")
        )
        return bool(result.rowcount)
