# src/fixmyhood/services/moderation.py
"""Moderation services: user flags and administrator actions."""

from __future__ import annotations

import hmac
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from fixmyhood.core.settings import settings
from fixmyhood.models import Comment, Flag, FlagContentType, FlagStatus, Profile, Report

logger = logging.getLogger(__name__)


class ModerationError(Exception):
    """Base exception for moderation failures."""


class FlagTargetNotFoundError(ModerationError):
    """The flagged report or comment does not exist."""


class AdminCodeError(ModerationError):
    """Admin promotion was attempted with a missing or wrong secret code."""


class ModerationService:
    """Service handling flags and administrator toggles."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _target(self, content_type: str, content_id: str) -> Report | Comment | None:
        model = Report if content_type == FlagContentType.REPORT.value else Comment
        return self.session.get(model, content_id)

    def create_flag(self, reporter: Profile, content_type: str, content_id: str, reason: str) -> Flag:
        """File a flag against a report or comment."""
        if self._target(content_type, content_id) is None:
            raise FlagTargetNotFoundError(f"{content_type} {content_id} not found")
        flag = Flag(
            reporter_id=reporter.id,
            content_type=content_type,
            content_id=content_id,
            reason=reason.strip(),
        )
        self.session.add(flag)
        self.session.commit()
        self.session.refresh(flag)
        return flag

    def list_flags(self, status: str | None = FlagStatus.PENDING.value, limit: int = 50) -> list[Flag]:
        stmt = select(Flag)
        if status is not None:
            stmt = stmt.where(Flag.status == status)
        stmt = stmt.order_by(Flag.created_at.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())

    def resolve_flag(self, flag: Flag, action: str) -> Flag:
        """Dismiss a flag, or hide its target and mark it reviewed."""
        if action == "dismiss":
            flag.status = FlagStatus.DISMISSED.value
        else:
            target = self._target(flag.content_type, flag.content_id)
            if target is not None:
                target.is_hidden = True
            flag.status = FlagStatus.REVIEWED.value
        self.session.commit()
        self.session.refresh(flag)
        logger.info("Flag %s resolved with %s", flag.id, action)
        return flag

    def set_report_hidden(self, report: Report, hidden: bool) -> Report:
        report.is_hidden = hidden
        self.session.commit()
        self.session.refresh(report)
        return report

    def set_comments_locked(self, report: Report, locked: bool) -> Report:
        report.comments_locked = locked
        self.session.commit()
        self.session.refresh(report)
        return report

    def set_comment_hidden(self, comment: Comment, hidden: bool) -> Comment:
        comment.is_hidden = hidden
        self.session.commit()
        self.session.refresh(comment)
        return comment

    def set_banned(self, profile: Profile, banned: bool) -> Profile:
        profile.is_banned = banned
        self.session.commit()
        self.session.refresh(profile)
        logger.info("Profile %s banned=%s", profile.id, banned)
        return profile

    def set_admin(self, profile: Profile, is_admin: bool) -> Profile:
        profile.is_admin = is_admin
        self.session.commit()
        self.session.refresh(profile)
        return profile

    def promote_with_code(self, profile: Profile, code: str) -> Profile:
        """Grant admin rights to a user presenting the configured secret code."""
        expected = settings.admin_secret_code
        if not expected:
            raise AdminCodeError("Admin setup is not configured")
        if not hmac.compare_digest(code.strip().encode(), expected.encode()):
            raise AdminCodeError("Invalid code")
        return self.set_admin(profile, True)
