"""Data access helpers for working with reports."""
from __future__ import annotations

from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from fixmyhood.db.time import utcnow
from fixmyhood.models.report import Follower, Report, ReportView
from fixmyhood.repositories.upsert import insert_ignore_conflicts, upsert_rows

__all__ = ["ReportRepository"]


class ReportRepository:
    """Thin wrapper around database access for report entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, report_id: str) -> Report | None:
        """Return a report by identifier."""
        return self.session.get(Report, report_id)

    def list_feed(
        self,
        *,
        limit: int,
        category: str | None = None,
        status: str | None = None,
        include_hidden: bool = False,
        include_duplicates: bool = False,
    ) -> list[Report]:
        """Return reports newest first, excluding hidden and duplicate rows by default."""
        stmt = select(Report)
        if not include_hidden:
            stmt = stmt.where(Report.is_hidden.is_(False))
        if not include_duplicates:
            stmt = stmt.where(Report.duplicate_of.is_(None))
        if category is not None:
            stmt = stmt.where(Report.category == category)
        if status is not None:
            stmt = stmt.where(Report.status == status)
        stmt = stmt.order_by(Report.created_at.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())

    def list_duplicate_pool(self, category: str, limit: int) -> list[Report]:
        """Return the most recent visible, non-duplicate reports in a category."""
        return self.list_feed(limit=limit, category=category)

    def create(self, **fields: Any) -> Report:
        """Insert a new report and return the persisted ORM instance."""
        report = Report(**fields)
        self.session.add(report)
        self.session.flush()
        return report

    def count_by_creator(self, creator_id: str) -> int:
        """Return how many reports the user has created."""
        return int(
            self.session.scalar(
                select(func.count()).select_from(Report).where(Report.creator_id == creator_id)
            )
            or 0
        )

    def advance_status(self, report_id: str, from_statuses: tuple[str, ...], to_status: str) -> bool:
        """Move a report to ``to_status`` only if it is currently in ``from_statuses``.

        The guard lives in the UPDATE's WHERE clause so two concurrent
        transitions cannot move the status backwards.
        """
        result = self.session.execute(
            update(Report)
            .where(Report.id == report_id, Report.status.in_(from_statuses))
            .values(status=to_status, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        return bool(result.rowcount)

    def clear_duplicate_links_to(self, report_id: str) -> None:
        """Detach every report that points at ``report_id`` as its original."""
        self.session.execute(
            update(Report)
            .where(Report.duplicate_of == report_id)
            .values(duplicate_of=None)
            .execution_options(synchronize_session="fetch")
        )

    # --- Followers ------------------------------------------------------------------
    def add_follower(self, report_id: str, user_id: str) -> bool:
        """Follow a report; returns False if the user already follows it."""
        inserted = insert_ignore_conflicts(
            self.session,
            Follower.__table__,
            [{"report_id": report_id, "user_id": user_id, "created_at": utcnow()}],
            ("report_id", "user_id"),
        )
        return inserted > 0

    def remove_follower(self, report_id: str, user_id: str) -> bool:
        """Unfollow a report; returns False if the user was not following it."""
        result = self.session.execute(
            delete(Follower).where(Follower.report_id == report_id, Follower.user_id == user_id)
        )
        return bool(result.rowcount)

    def is_following(self, report_id: str, user_id: str) -> bool:
        return self.session.get(Follower, (report_id, user_id)) is not None

    def followers_count(self, report_id: str) -> int:
        return int(
            self.session.scalar(
                select(func.count()).select_from(Follower).where(Follower.report_id == report_id)
            )
            or 0
        )

    # --- Views ----------------------------------------------------------------------
    def record_view(self, report_id: str, user_id: str) -> None:
        """Upsert the viewer's last-seen timestamp for a report."""
        upsert_rows(
            self.session,
            ReportView.__table__,
            [{"report_id": report_id, "user_id": user_id, "viewed_at": utcnow()}],
            ("report_id", "user_id"),
            ("viewed_at",),
        )

    def views_count(self, report_id: str) -> int:
        return int(
            self.session.scalar(
                select(func.count()).select_from(ReportView).where(ReportView.report_id == report_id)
            )
            or 0
        )
