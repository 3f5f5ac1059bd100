"""Tests for peer verification of fixes and the one-time author bonus."""

import pytest

from fixmyhood.models import CommentType
from fixmyhood.services.comments import AlreadyVerifiedError, CommentRuleError, CommentService
from fixmyhood.services.gamification import GamificationService, reward_verified_fix

FIX_PHOTO = "/static/uploads/fix.jpg"


@pytest.fixture()
def fix_comment(make_report, make_comment, test_user, other_user):
    report = make_report(other_user)
    make_comment(report, test_user, CommentType.PROGRESS, image_url=FIX_PHOTO)
    return make_comment(report, test_user, CommentType.CONFIRM_FIX, image_url=FIX_PHOTO)


def test_third_verification_pays_bonus_once(db_session, make_profile, fix_comment, test_user) -> None:
    service = CommentService(db_session)
    results = [service.verify_fix(fix_comment, make_profile()) for _ in range(5)]

    assert [r.author_bonus_awarded for r in results] == [False, False, True, False, False]
    assert [r.verification_count for r in results] == [1, 2, 3, 4, 5]
    db_session.refresh(test_user)
    assert test_user.points == 15
    db_session.refresh(fix_comment)
    assert fix_comment.fix_bonus_awarded


def test_count_jumping_past_threshold_still_pays_once(
    db_session, make_profile, fix_comment, test_user
) -> None:
    gamification = GamificationService(db_session)
    verifiers = [make_profile() for _ in range(4)]
    for verifier in verifiers[:2]:
        gamification.comments.add_verification(fix_comment.id, verifier.id)
    db_session.commit()
    assert not reward_verified_fix(db_session, fix_comment)

    # Two verifications land before the bonus check runs: 2 -> 4.
    for verifier in verifiers[2:]:
        gamification.comments.add_verification(fix_comment.id, verifier.id)
    db_session.commit()

    assert reward_verified_fix(db_session, fix_comment)
    assert not reward_verified_fix(db_session, fix_comment)
    db_session.refresh(test_user)
    assert test_user.points == 15


def test_verifier_earns_confirm_fix_points(db_session, fix_comment, other_user) -> None:
    CommentService(db_session).verify_fix(fix_comment, other_user)

    db_session.refresh(other_user)
    assert other_user.points == 5


def test_repeat_verification_is_rejected(db_session, fix_comment, other_user) -> None:
    service = CommentService(db_session)
    service.verify_fix(fix_comment, other_user)

    with pytest.raises(AlreadyVerifiedError):
        service.verify_fix(fix_comment, other_user)
    assert service.comments.verification_count(fix_comment.id) == 1


def test_author_cannot_verify_own_fix(db_session, fix_comment, test_user) -> None:
    with pytest.raises(CommentRuleError):
        CommentService(db_session).verify_fix(fix_comment, test_user)


def test_only_fix_confirmations_can_be_verified(
    db_session, make_report, make_comment, test_user, other_user
) -> None:
    plain = make_comment(make_report(test_user), test_user)

    with pytest.raises(CommentRuleError):
        CommentService(db_session).verify_fix(plain, other_user)
