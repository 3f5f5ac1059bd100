# src/fixmyhood/services/reports.py
"""Report lifecycle: creation, edits, status transitions and duplicate links."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from fixmyhood.core.settings import settings
from fixmyhood.models import CommentType, Profile, Report, ReportStatus
from fixmyhood.repositories import CommentRepository, ReportRepository
from fixmyhood.schemas.report import ReportCreate, ReportUpdate
from fixmyhood.services.gamification import ActionKind, reward_action
from fixmyhood.services.storage import LocalBlobStore

logger = logging.getLogger(__name__)

# Status an ordinary comment moves a report to, keyed by current status.
_ACKNOWLEDGE_FROM = (ReportStatus.OPEN.value,)
_IN_PROGRESS_FROM = (ReportStatus.OPEN.value, ReportStatus.ACKNOWLEDGED.value)


class ReportError(Exception):
    """Base exception for report rule violations."""


class ReportPermissionError(ReportError):
    """The acting user may not perform this change."""


class ReportStatusError(ReportError):
    """A status change that would move the lifecycle backwards."""


class DuplicateCycleError(ReportError):
    """A duplicate link that would make the duplicate forest cyclic."""


def would_create_cycle(session: Session, report_id: str, original_id: str) -> bool:
    """Return True if linking ``report_id`` to ``original_id`` would form a cycle.

    Walks parent pointers upward from ``original_id`` with a visited set. An
    already-cyclic chain also counts as a cycle.
    """
    if report_id == original_id:
        return True
    visited: set[str] = set()
    current: str | None = original_id
    while current is not None:
        if current == report_id or current in visited:
            return True
        visited.add(current)
        node = session.get(Report, current)
        current = node.duplicate_of if node is not None else None
    return False


class ReportService:
    """Orchestrates report writes and their side effects."""

    def __init__(self, session: Session, blob_store: LocalBlobStore | None = None) -> None:
        self.session = session
        self.reports = ReportRepository(session)
        self.comments = CommentRepository(session)
        self.blob_store = blob_store

    def create_report(self, creator: Profile, data: ReportCreate) -> Report:
        """Insert a report, follow it for the creator, and reward the creator."""
        report = self.reports.create(
            creator_id=creator.id,
            title=data.title,
            description=data.description,
            category=data.category.value,
            photo_url=data.photo_url,
            location_text=data.location_text or None,
            latitude=data.latitude,
            longitude=data.longitude,
        )
        self.reports.add_follower(report.id, creator.id)
        self.session.commit()
        logger.info("Report %s created by %s", report.id, creator.id)

        reward_action(self.session, creator.id, ActionKind.REPORT_CREATED)
        self.session.refresh(report)
        return report

    def update_report(self, report: Report, editor: Profile, data: ReportUpdate) -> Report:
        """Apply an owner's edits; a replaced or removed photo is deleted from storage."""
        if report.creator_id != editor.id:
            raise ReportPermissionError("Only the creator can edit this report")

        if data.title is not None:
            report.title = data.title
        if data.description is not None:
            report.description = data.description
        if data.category is not None:
            report.category = data.category.value

        old_photo = report.photo_url
        if data.photo_url is not None:
            report.photo_url = data.photo_url
        elif data.remove_photo:
            report.photo_url = None

        self.session.commit()
        if old_photo and old_photo != report.photo_url and self.blob_store is not None:
            self.blob_store.remove(old_photo)
        self.session.refresh(report)
        return report

    def delete_report(self, report: Report, actor: Profile) -> None:
        """Delete a report owned by ``actor`` together with its photo."""
        if report.creator_id != actor.id:
            raise ReportPermissionError("Only the creator can delete this report")
        photo_url = report.photo_url
        report_id = report.id
        self.reports.clear_duplicate_links_to(report_id)
        self.session.delete(report)
        self.session.commit()
        if photo_url and self.blob_store is not None:
            self.blob_store.remove(photo_url)
        logger.info("Report %s deleted by %s", report_id, actor.id)

    def set_status(self, report: Report, status: ReportStatus, *, override: bool = False) -> Report:
        """Move a report to ``status``.

        Without ``override`` the lifecycle only moves forward.
        """
        current = ReportStatus(report.status)
        if not override and status.rank < current.rank:
            raise ReportStatusError(f"Cannot move report from {current} back to {status}")
        report.status = status.value
        self.session.commit()
        self.session.refresh(report)
        return report

    def has_verified_fix(self, report_id: str) -> bool:
        """Return True if any confirm_fix comment on the report is peer-verified."""
        fix_ids = [
            c.id
            for c in self.comments.list_for_report(report_id, include_hidden=True)
            if c.comment_type == CommentType.CONFIRM_FIX.value
        ]
        counts = self.comments.verification_counts(fix_ids)
        return any(count >= settings.verification_threshold for count in counts.values())

    def close_report(self, report: Report, actor: Profile) -> Report:
        """Close a report on behalf of its creator once a fix has been verified."""
        if report.creator_id != actor.id:
            raise ReportPermissionError("Only the creator can close this report")
        if not self.has_verified_fix(report.id):
            raise ReportStatusError("A verified fix is required before closing")
        return self.set_status(report, ReportStatus.CLOSED)

    def apply_comment_transition(self, report: Report, comment_type: str) -> None:
        """Advance the status after a comment is posted.

        A progress update moves open or acknowledged reports to in_progress;
        any other comment acknowledges an open report.
        """
        if comment_type == CommentType.PROGRESS.value:
            changed = self.reports.advance_status(
                report.id, _IN_PROGRESS_FROM, ReportStatus.IN_PROGRESS.value
            )
        else:
            changed = self.reports.advance_status(
                report.id, _ACKNOWLEDGE_FROM, ReportStatus.ACKNOWLEDGED.value
            )
        if changed:
            self.session.commit()

    def mark_duplicate(self, report: Report, original_id: str) -> Report:
        """Link ``report`` to its original after checking the forest stays acyclic."""
        original = self.reports.get_by_id(original_id)
        if original is None:
            raise ReportError("Original report not found")
        if would_create_cycle(self.session, report.id, original.id):
            raise DuplicateCycleError("Duplicate link would create a cycle")
        report.duplicate_of = original.id
        self.session.commit()
        self.session.refresh(report)
        logger.info("Report %s marked duplicate of %s", report.id, original.id)
        return report

    def clear_duplicate(self, report: Report) -> Report:
        report.duplicate_of = None
        self.session.commit()
        self.session.refresh(report)
        return report
