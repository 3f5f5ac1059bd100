# src/fixmyhood/services/gamification.py
"""Points economy and badge rules.

Every qualifying action (creating a report, commenting, verifying a fix) awards
a fixed number of points and re-evaluates the badge rules for the acting user.
Both steps are safe to repeat: points use an atomic increment and badges are
inserted with a conflict-ignoring upsert on ``(user_id, badge_type)``.

Rewards are supplementary, so request handlers go through :func:`reward_action`
and :func:`reward_verified_fix`, which log store failures instead of failing the
primary action.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import Final

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fixmyhood.core.settings import settings
from fixmyhood.models.badge import BadgeType
from fixmyhood.models.comment import Comment, CommentType
from fixmyhood.repositories import BadgeRepository, CommentRepository, ProfileRepository, ReportRepository

logger = logging.getLogger(__name__)


class ActionKind(StrEnum):
    """Actions that earn points."""

    REPORT_CREATED = "report_created"
    COMMENT = "comment"
    PROGRESS_UPDATE = "progress_update"
    CONFIRM_FIX = "confirm_fix"
    VERIFIED_FIX = "verified_fix"


POINTS: Final[Mapping[str, int]] = MappingProxyType(
    {
        ActionKind.REPORT_CREATED.value: 10,
        ActionKind.COMMENT.value: 2,
        ActionKind.PROGRESS_UPDATE.value: 5,
        ActionKind.CONFIRM_FIX.value: 5,
        ActionKind.VERIFIED_FIX.value: 15,
    }
)

# Points earned for posting each comment type.
COMMENT_ACTIONS: Final[Mapping[str, ActionKind]] = MappingProxyType(
    {
        CommentType.COMMENT.value: ActionKind.COMMENT,
        CommentType.PROGRESS.value: ActionKind.PROGRESS_UPDATE,
        CommentType.CONFIRM_FIX.value: ActionKind.CONFIRM_FIX,
    }
)


class GamificationError(RuntimeError):
    """Base exception for reward failures."""


class InvalidActionKindError(GamificationError, ValueError):
    """Raised when points are requested for an action outside the point table."""

    def __init__(self, action_kind: object) -> None:
        super().__init__(f"Unknown action kind: {action_kind!r}")
        self.action_kind = action_kind


def points_for(action_kind: str) -> int:
    """Return the point value of an action.

    Raises:
        InvalidActionKindError: If the action is not in the point table.
    """
    try:
        return POINTS[str(action_kind)]
    except KeyError:
        raise InvalidActionKindError(action_kind) from None


def evaluate_badge_rules(
    *,
    earned: Iterable[str],
    report_count: int,
    comment_count: int,
    fix_verification_counts: Iterable[int],
) -> list[BadgeType]:
    """Return the badges newly qualified for, given a user's activity.

    Args:
        earned: Badge types the user already holds.
        report_count: Reports the user has created.
        comment_count: Comments the user has authored, of any type.
        fix_verification_counts: Verification count of each of the user's
            confirm_fix comments.
    """
    held = set(earned)
    new_badges: list[BadgeType] = []

    if BadgeType.FIRST_REPORT not in held and report_count >= 1:
        new_badges.append(BadgeType.FIRST_REPORT)

    if BadgeType.HELPER not in held and comment_count >= settings.helper_comment_threshold:
        new_badges.append(BadgeType.HELPER)

    if BadgeType.RESOLVER not in held:
        verified_fixes = sum(
            1 for count in fix_verification_counts if count >= settings.verification_threshold
        )
        if verified_fixes >= settings.resolver_fix_threshold:
            new_badges.append(BadgeType.RESOLVER)

    return new_badges


class GamificationService:
    """Awards points and badges against the relational store."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.profiles = ProfileRepository(session)
        self.badges = BadgeRepository(session)
        self.reports = ReportRepository(session)
        self.comments = CommentRepository(session)

    def award_points(self, user_id: str, action_kind: str) -> int:
        """Add the action's points to the user's total and return the delta.

        The increment is a single ``points = points + delta`` update, so
        concurrent awards to the same user are never lost.

        Raises:
            InvalidActionKindError: If ``action_kind`` is unknown; nothing is written.
        """
        delta = points_for(action_kind)
        if not self.profiles.increment_points(user_id, delta):
            logger.warning("Skipped %s award: profile %s not found", action_kind, user_id)
            return 0
        logger.debug("Awarded %d points to %s for %s", delta, user_id, action_kind)
        return delta

    def check_and_award_badges(self, user_id: str) -> list[BadgeType]:
        """Evaluate every badge rule for a user and insert the newly earned ones.

        Returns the badge types that qualified on this call. Calls that find
        nothing new issue no write.
        """
        earned = self.badges.earned_types(user_id)
        report_count = self.reports.count_by_creator(user_id)
        comment_count = self.comments.count_by_user(user_id)

        fix_counts: list[int] = []
        if BadgeType.RESOLVER not in earned:
            fix_ids = self.comments.confirm_fix_ids_for_user(user_id)
            if fix_ids:
                fix_counts = list(self.comments.verification_counts(fix_ids).values())

        new_badges = evaluate_badge_rules(
            earned=earned,
            report_count=report_count,
            comment_count=comment_count,
            fix_verification_counts=fix_counts,
        )
        if new_badges:
            self.badges.upsert_many(user_id, new_badges)
            logger.info(
                "User %s earned badges: %s",
                user_id,
                ", ".join(badge.value for badge in new_badges),
            )
        return new_badges

    def award_verified_fix(self, comment: Comment) -> bool:
        """Pay the fix author's one-time bonus once the comment is peer-verified.

        Fires when the verification count is at or above the threshold and the
        bonus has not been claimed yet, so a count that jumps past the
        threshold under concurrent verifications still pays exactly once.
        """
        if comment.comment_type != CommentType.CONFIRM_FIX.value:
            return False
        count = self.comments.verification_count(comment.id)
        if count < settings.verification_threshold:
            return False
        if not self.comments.claim_fix_bonus(comment.id):
            return False
        self.award_points(comment.user_id, ActionKind.VERIFIED_FIX)
        self.check_and_award_badges(comment.user_id)
        logger.info("Comment %s reached %d verifications; bonus paid", comment.id, count)
        return True


def reward_action(session: Session, user_id: str, action_kind: str) -> None:
    """Award points and re-check badges without failing the caller.

    Store failures are logged and rolled back. An unknown action kind is a
    programming error: it is raised in debug mode and logged otherwise.
    """
    service = GamificationService(session)
    try:
        service.award_points(user_id, action_kind)
        service.check_and_award_badges(user_id)
        session.commit()
    except InvalidActionKindError:
        session.rollback()
        if settings.debug:
            raise
        logger.exception("Refused to award points for %r", action_kind)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning("Reward for %s (%s) failed: %s", user_id, action_kind, exc)


def reward_verified_fix(session: Session, comment: Comment) -> bool:
    """Run :meth:`GamificationService.award_verified_fix` without failing the caller."""
    try:
        paid = GamificationService(session).award_verified_fix(comment)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning("Verified-fix bonus for comment %s failed: %s", comment.id, exc)
        return False
    return paid
