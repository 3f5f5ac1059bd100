"""Profile bootstrap and badge-gated frame selection."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Final

from sqlalchemy.orm import Session

from fixmyhood.models import BadgeType, FrameType, Profile
from fixmyhood.repositories import BadgeRepository, ProfileRepository

logger = logging.getLogger(__name__)

BADGE_FRAMES: Final[Mapping[str, FrameType]] = MappingProxyType(
    {
        BadgeType.FIRST_REPORT.value: FrameType.FIRST_REPORT,
        BadgeType.HELPER.value: FrameType.HELPER,
        BadgeType.RESOLVER.value: FrameType.RESOLVER,
    }
)


class FrameLockedError(ValueError):
    """The requested frame needs a badge the user has not earned."""


def unlocked_frames(badge_types: Iterable[str]) -> list[FrameType]:
    """Return the frames available to a holder of ``badge_types``, default first."""
    held = set(badge_types)
    frames = [FrameType.DEFAULT]
    frames.extend(frame for badge, frame in BADGE_FRAMES.items() if badge in held)
    return frames


def display_name_from_claims(claims: Mapping[str, Any]) -> str:
    """Pick a display name from identity-provider token claims."""
    metadata = claims.get("user_metadata") or {}
    for candidate in (
        metadata.get("full_name"),
        metadata.get("name"),
        claims.get("name"),
    ):
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    email = claims.get("email")
    if isinstance(email, str) and "@" in email:
        return email.split("@", 1)[0]
    return "User"


def avatar_from_claims(claims: Mapping[str, Any]) -> str | None:
    metadata = claims.get("user_metadata") or {}
    avatar = metadata.get("avatar_url") or claims.get("picture")
    return avatar if isinstance(avatar, str) else None


class ProfileService:
    """Reads and updates profiles."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.profiles = ProfileRepository(session)
        self.badges = BadgeRepository(session)

    def ensure_profile(self, profile_id: str, claims: Mapping[str, Any]) -> tuple[Profile, bool]:
        """Return the profile for ``profile_id``, creating it from claims on first login."""
        profile = self.profiles.get_by_id(profile_id)
        if profile is not None:
            return profile, False
        profile = self.profiles.create(
            profile_id=profile_id,
            display_name=display_name_from_claims(claims),
            avatar_url=avatar_from_claims(claims),
        )
        self.session.commit()
        logger.info("Created profile %s", profile_id)
        return profile, True

    def unlocked_frames_for(self, profile_id: str) -> list[FrameType]:
        return unlocked_frames(self.badges.earned_types(profile_id))

    def set_active_frame(self, profile: Profile, frame: FrameType) -> Profile:
        """Select a profile frame the user has unlocked.

        Raises:
            FrameLockedError: If the frame's badge has not been earned.
        """
        if frame not in self.unlocked_frames_for(profile.id):
            raise FrameLockedError(f"Frame {frame.value} is locked")
        profile.active_frame = frame.value
        self.session.commit()
        self.session.refresh(profile)
        return profile
