"""Tests for the points economy and badge rules."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from fixmyhood.core.settings import settings
from fixmyhood.models import BadgeType, CommentType, UserBadge
from fixmyhood.repositories import ProfileRepository
from fixmyhood.services.gamification import (
    POINTS,
    ActionKind,
    GamificationService,
    InvalidActionKindError,
    evaluate_badge_rules,
    points_for,
    reward_action,
)


def _badge_rows(db_session, user_id: str) -> list[str]:
    return list(
        db_session.execute(select(UserBadge.badge_type).where(UserBadge.user_id == user_id)).scalars()
    )


def test_point_table() -> None:
    assert dict(POINTS) == {
        "report_created": 10,
        "comment": 2,
        "progress_update": 5,
        "confirm_fix": 5,
        "verified_fix": 15,
    }


def test_points_for_unknown_action() -> None:
    with pytest.raises(InvalidActionKindError):
        points_for("spam")


def test_award_points_increments_total(db_session, test_user) -> None:
    service = GamificationService(db_session)

    assert service.award_points(test_user.id, ActionKind.REPORT_CREATED) == 10
    db_session.commit()
    db_session.refresh(test_user)

    assert test_user.points == 10


def test_award_points_unknown_action_writes_nothing(db_session, test_user) -> None:
    with pytest.raises(InvalidActionKindError):
        GamificationService(db_session).award_points(test_user.id, "spam")

    db_session.refresh(test_user)
    assert test_user.points == 0


def test_award_points_missing_profile_is_skipped(db_session) -> None:
    assert GamificationService(db_session).award_points("nobody", ActionKind.COMMENT) == 0


def test_points_equal_sum_of_awarded_deltas(db_session, test_user) -> None:
    actions = [
        ActionKind.REPORT_CREATED,
        ActionKind.COMMENT,
        ActionKind.COMMENT,
        ActionKind.PROGRESS_UPDATE,
        ActionKind.CONFIRM_FIX,
        ActionKind.VERIFIED_FIX,
    ]
    for action in actions:
        reward_action(db_session, test_user.id, action)

    db_session.refresh(test_user)
    assert test_user.points == sum(POINTS[a.value] for a in actions)


def test_reward_action_logs_unknown_action_outside_debug(db_session, test_user, mocker) -> None:
    mocker.patch.object(settings, "debug", False)

    reward_action(db_session, test_user.id, "spam")

    db_session.refresh(test_user)
    assert test_user.points == 0


def test_reward_action_raises_unknown_action_in_debug(db_session, test_user, mocker) -> None:
    mocker.patch.object(settings, "debug", True)

    with pytest.raises(InvalidActionKindError):
        reward_action(db_session, test_user.id, "spam")


def test_reward_action_swallows_store_errors(db_session, test_user, mocker) -> None:
    mocker.patch.object(
        ProfileRepository,
        "increment_points",
        side_effect=OperationalError("UPDATE", {}, Exception("disk I/O error")),
    )

    reward_action(db_session, test_user.id, ActionKind.COMMENT)

    db_session.refresh(test_user)
    assert test_user.points == 0


def test_first_report_badge(db_session, make_report, test_user) -> None:
    make_report(test_user)

    assert GamificationService(db_session).check_and_award_badges(test_user.id) == [
        BadgeType.FIRST_REPORT
    ]
    db_session.commit()
    assert _badge_rows(db_session, test_user.id) == ["first_report"]


def test_badge_check_is_idempotent(db_session, make_report, test_user) -> None:
    make_report(test_user)
    service = GamificationService(db_session)

    service.check_and_award_badges(test_user.id)
    assert service.check_and_award_badges(test_user.id) == []
    db_session.commit()

    count = db_session.scalar(
        select(func.count()).select_from(UserBadge).where(UserBadge.user_id == test_user.id)
    )
    assert count == 1


def test_upsert_ignores_existing_badge_rows(db_session, test_user) -> None:
    service = GamificationService(db_session)
    service.badges.upsert_many(test_user.id, [BadgeType.HELPER])
    assert service.badges.upsert_many(test_user.id, [BadgeType.HELPER]) == 0
    db_session.commit()

    assert _badge_rows(db_session, test_user.id) == ["helper"]


def test_helper_badge_threshold(db_session, make_report, make_comment, test_user, other_user) -> None:
    report = make_report(other_user)
    for _ in range(4):
        make_comment(report, test_user)
    service = GamificationService(db_session)

    assert BadgeType.HELPER not in service.check_and_award_badges(test_user.id)

    make_comment(report, test_user)
    assert service.check_and_award_badges(test_user.id) == [BadgeType.HELPER]
    db_session.commit()

    assert _badge_rows(db_session, test_user.id).count("helper") == 1


def test_resolver_badge_needs_two_verified_fixes(
    db_session, make_report, make_comment, make_profile, test_user, other_user
) -> None:
    verifiers = [make_profile() for _ in range(3)]
    service = GamificationService(db_session)

    for n in range(2):
        report = make_report(other_user, f"Leaking hydrant {n}")
        fix = make_comment(report, test_user, CommentType.CONFIRM_FIX, image_url="/static/uploads/x.jpg")
        for verifier in verifiers:
            service.comments.add_verification(fix.id, verifier.id)
        db_session.commit()
        earned = service.check_and_award_badges(test_user.id)
        if n == 0:
            assert BadgeType.RESOLVER not in earned

    assert "resolver" in _badge_rows(db_session, test_user.id)


@pytest.mark.parametrize(
    ("reports", "comments", "fix_counts", "expected"),
    [
        (0, 0, [], []),
        (1, 0, [], [BadgeType.FIRST_REPORT]),
        (0, 5, [], [BadgeType.HELPER]),
        (0, 4, [], []),
        (0, 2, [3, 2], []),
        (0, 2, [3, 7], [BadgeType.RESOLVER]),
    ],
)
def test_evaluate_badge_rules(reports, comments, fix_counts, expected) -> None:
    assert (
        evaluate_badge_rules(
            earned=set(),
            report_count=reports,
            comment_count=comments,
            fix_verification_counts=fix_counts,
        )
        == expected
    )


def test_evaluate_badge_rules_skips_held_badges() -> None:
    assert (
        evaluate_badge_rules(
            earned={"first_report", "helper"},
            report_count=3,
            comment_count=9,
            fix_verification_counts=[],
        )
        == []
    )
