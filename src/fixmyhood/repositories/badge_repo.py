"""Data access helpers for earned badges."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from fixmyhood.db.time import utcnow
from fixmyhood.models.badge import UserBadge
from fixmyhood.repositories.upsert import insert_ignore_conflicts

__all__ = ["BadgeRepository"]


class BadgeRepository:
    """Read and insert-only access to the ``user_badges`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def earned_types(self, user_id: str) -> set[str]:
        """Return the badge types the user already holds."""
        result = self.session.execute(
            select(UserBadge.badge_type).where(UserBadge.user_id == user_id)
        )
        return set(result.scalars())

    def list_for_user(self, user_id: str) -> list[UserBadge]:
        """Return badge rows for a user ordered by award time."""
        result = self.session.execute(
            select(UserBadge)
            .where(UserBadge.user_id == user_id)
            .order_by(UserBadge.earned_at)
        )
        return list(result.scalars())

    def upsert_many(self, user_id: str, badge_types: Iterable[str]) -> int:
        """Insert all ``badge_types`` for a user in one statement.

        Conflicts on ``(user_id, badge_type)`` are ignored, so concurrent or
        repeated calls never duplicate a badge.
        """
        now = utcnow()
        rows = [
            {"user_id": user_id, "badge_type": str(badge_type), "earned_at": now}
            for badge_type in badge_types
        ]
        return insert_ignore_conflicts(
            self.session,
            UserBadge.__table__,
            rows,
            ("user_id", "badge_type"),
        )
