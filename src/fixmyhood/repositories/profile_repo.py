"""Data access helpers for profiles."""
from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from fixmyhood.models.profile import Profile

__all__ = ["ProfileRepository"]


class ProfileRepository:
    """Thin wrapper around database access for profile entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, profile_id: str) -> Profile | None:
        """Return a profile by identifier."""
        return self.session.get(Profile, profile_id)

    def create(
        self,
        *,
        profile_id: str,
        display_name: str,
        avatar_url: str | None = None,
    ) -> Profile:
        """Insert a new profile and return the persisted ORM instance."""
        profile = Profile(id=profile_id, display_name=display_name, avatar_url=avatar_url)
        self.session.add(profile)
        self.session.flush()
        return profile

    def increment_points(self, profile_id: str, delta: int) -> bool:
        """Atomically add ``delta`` to a profile's points.

        Issues ``UPDATE profiles SET points = points + :delta`` so concurrent
        awards never lose an update. Returns False when no such profile exists.
        """
        result = self.session.execute(
            update(Profile)
            .where(Profile.id == profile_id)
            .values(points=Profile.points + delta)
            .execution_options(synchronize_session="fetch")
        )
        return bool(result.rowcount)

    def leaderboard(self, limit: int) -> list[Profile]:
        """Return non-banned profiles ordered by points, highest first."""
        result = self.session.execute(
            select(Profile)
            .where(Profile.is_banned.is_(False))
            .order_by(Profile.points.desc(), Profile.created_at)
            .limit(limit)
        )
        return list(result.scalars())
