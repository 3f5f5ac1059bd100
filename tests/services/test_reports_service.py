"""Tests for report lifecycle rules."""

from datetime import UTC, datetime

import pytest
from sqlalchemy import insert, select

from fixmyhood.models import CommentType, ReportStatus
from fixmyhood.models.report import ReportView
from fixmyhood.repositories import BadgeRepository, ReportRepository
from fixmyhood.schemas.comment import CommentCreate
from fixmyhood.schemas.report import ReportCreate, ReportUpdate
from fixmyhood.services.comments import CommentClosedError, CommentRuleError, CommentService
from fixmyhood.services.reports import (
    DuplicateCycleError,
    ReportPermissionError,
    ReportService,
    ReportStatusError,
    would_create_cycle,
)
from fixmyhood.services.storage import LocalBlobStore

PHOTO = "/static/uploads/p.jpg"


def test_create_report_follows_and_rewards(db_session, test_user) -> None:
    service = ReportService(db_session)
    report = service.create_report(
        test_user,
        ReportCreate(title="  Broken bench  ", description="Slats missing", category="infrastructure"),
    )

    assert report.title == "Broken bench"
    assert report.status == ReportStatus.OPEN.value
    assert service.reports.is_following(report.id, test_user.id)
    db_session.refresh(test_user)
    assert test_user.points == 10
    assert "first_report" in BadgeRepository(db_session).earned_types(test_user.id)


def test_only_creator_can_edit(db_session, test_report, other_user) -> None:
    with pytest.raises(ReportPermissionError):
        ReportService(db_session).update_report(test_report, other_user, ReportUpdate(title="Mine now"))


def test_update_replacing_photo_removes_old_blob(db_session, make_report, test_user, tmp_path) -> None:
    store = LocalBlobStore(tmp_path, "/static/uploads")
    old_file = tmp_path / test_user.id / "old.jpg"
    old_file.parent.mkdir(parents=True)
    old_file.write_bytes(b"jpeg")
    report = make_report(test_user, photo_url=f"/static/uploads/{test_user.id}/old.jpg")

    ReportService(db_session, store).update_report(
        report, test_user, ReportUpdate(photo_url=f"/static/uploads/{test_user.id}/new.jpg")
    )

    assert not old_file.exists()


def test_status_only_moves_forward(db_session, test_report) -> None:
    service = ReportService(db_session)
    service.set_status(test_report, ReportStatus.IN_PROGRESS)

    with pytest.raises(ReportStatusError):
        service.set_status(test_report, ReportStatus.OPEN)

    assert service.set_status(test_report, ReportStatus.OPEN, override=True).status == "open"


def test_comment_acknowledges_open_report(db_session, test_report, other_user) -> None:
    CommentService(db_session).post_comment(test_report, other_user, CommentCreate(content="Same here"))

    db_session.refresh(test_report)
    assert test_report.status == ReportStatus.ACKNOWLEDGED.value


def test_progress_moves_report_in_progress(db_session, test_report, other_user) -> None:
    service = CommentService(db_session)
    service.post_comment(
        test_report,
        other_user,
        CommentCreate(content="Crew on site", comment_type=CommentType.PROGRESS, image_url=PHOTO),
    )
    db_session.refresh(test_report)
    assert test_report.status == ReportStatus.IN_PROGRESS.value

    service.post_comment(test_report, other_user, CommentCreate(content="Thanks"))
    db_session.refresh(test_report)
    assert test_report.status == ReportStatus.IN_PROGRESS.value


def test_evidence_comments_need_a_photo(db_session, test_report, other_user) -> None:
    with pytest.raises(CommentRuleError):
        CommentService(db_session).post_comment(
            test_report, other_user, CommentCreate(content="Crew on site", comment_type=CommentType.PROGRESS)
        )


def test_fix_confirmation_needs_prior_progress(db_session, test_report, other_user) -> None:
    with pytest.raises(CommentRuleError):
        CommentService(db_session).post_comment(
            test_report,
            other_user,
            CommentCreate(content="Fixed!", comment_type=CommentType.CONFIRM_FIX, image_url=PHOTO),
        )


def test_locked_and_closed_reports_reject_comments(db_session, make_report, test_user, other_user) -> None:
    service = CommentService(db_session)
    locked = make_report(test_user, comments_locked=True)
    closed = make_report(test_user, status=ReportStatus.CLOSED.value)

    for report in (locked, closed):
        with pytest.raises(CommentClosedError):
            service.post_comment(report, other_user, CommentCreate(content="Hello"))


def test_close_requires_verified_fix(
    db_session, test_report, make_comment, make_profile, test_user, other_user
) -> None:
    service = ReportService(db_session)
    with pytest.raises(ReportStatusError):
        service.close_report(test_report, test_user)

    fix = make_comment(test_report, other_user, CommentType.CONFIRM_FIX, image_url=PHOTO)
    for _ in range(3):
        service.comments.add_verification(fix.id, make_profile().id)
    db_session.commit()

    with pytest.raises(ReportPermissionError):
        service.close_report(test_report, other_user)
    assert service.close_report(test_report, test_user).status == ReportStatus.CLOSED.value


def test_duplicate_cycle_detection(db_session, make_report, test_user) -> None:
    a = make_report(test_user, "Report A")
    b = make_report(test_user, "Report B", duplicate_of=a.id)
    c = make_report(test_user, "Report C", duplicate_of=b.id)

    assert would_create_cycle(db_session, a.id, c.id)
    assert would_create_cycle(db_session, a.id, a.id)
    assert not would_create_cycle(db_session, c.id, a.id)


def test_mark_duplicate_rejects_cycles(db_session, make_report, test_user) -> None:
    service = ReportService(db_session)
    a = make_report(test_user, "Report A")
    b = make_report(test_user, "Report B")

    service.mark_duplicate(b, a.id)
    with pytest.raises(DuplicateCycleError):
        service.mark_duplicate(a, b.id)

    assert service.clear_duplicate(b).duplicate_of is None


def test_delete_detaches_duplicates(db_session, make_report, test_user) -> None:
    original = make_report(test_user, "Original")
    dupe = make_report(test_user, "Copy", duplicate_of=original.id)

    ReportService(db_session).delete_report(original, test_user)

    db_session.refresh(dupe)
    assert dupe.duplicate_of is None


def test_repeat_views_refresh_the_timestamp(db_session, test_report, other_user, mocker) -> None:
    first, later = datetime(2024, 5, 1, 9, 0, tzinfo=UTC), datetime(2024, 5, 2, 18, 30, tzinfo=UTC)
    clock = mocker.patch("fixmyhood.repositories.report_repo.utcnow", return_value=first)
    reports = ReportRepository(db_session)
    reports.record_view(test_report.id, other_user.id)
    db_session.commit()

    clock.return_value = later
    reports.record_view(test_report.id, other_user.id)
    db_session.commit()

    viewed = db_session.scalars(select(ReportView.viewed_at).where(ReportView.report_id == test_report.id)).all()
    assert reports.views_count(test_report.id) == 1
    assert [v.replace(tzinfo=None) for v in viewed] == [later.replace(tzinfo=None)]


def test_view_recorded_elsewhere_does_not_collide(db_session, engine, test_report, other_user) -> None:
    with engine.begin() as conn:
        conn.execute(insert(ReportView).values(report_id=test_report.id, user_id=other_user.id))

    reports = ReportRepository(db_session)
    reports.record_view(test_report.id, other_user.id)
    db_session.commit()

    assert reports.views_count(test_report.id) == 1
