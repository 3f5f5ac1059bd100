# src/fixmyhood/services/comments.py
"""Comment posting and peer verification of claimed fixes."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from fixmyhood.models import Comment, CommentType, Profile, Report, ReportStatus
from fixmyhood.repositories import CommentRepository
from fixmyhood.schemas.comment import CommentCreate, CommentResponse, VerificationResponse
from fixmyhood.services.gamification import COMMENT_ACTIONS, ActionKind, reward_action, reward_verified_fix
from fixmyhood.services.reports import ReportService

logger = logging.getLogger(__name__)

_EVIDENCE_TYPES = frozenset({CommentType.PROGRESS.value, CommentType.CONFIRM_FIX.value})


class CommentRuleError(ValueError):
    """A comment or verification that breaks a posting rule."""


class CommentClosedError(CommentRuleError):
    """The report no longer accepts comments."""


class AlreadyVerifiedError(CommentRuleError):
    """The user has already verified this fix."""


class CommentService:
    """Posts comments, lists them with verification state, and records verifications."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.comments = CommentRepository(session)
        self.report_service = ReportService(session)

    def post_comment(self, report: Report, author: Profile, data: CommentCreate) -> Comment:
        """Post a comment, reward the author, and advance the report status."""
        comment_type = data.comment_type.value
        if report.status == ReportStatus.CLOSED.value or report.comments_locked:
            raise CommentClosedError("Comments are closed on this report")
        if comment_type in _EVIDENCE_TYPES and not data.image_url:
            raise CommentRuleError("Photo evidence is required for this comment type")
        if comment_type == CommentType.CONFIRM_FIX.value and not self.comments.report_has_progress(
            report.id
        ):
            raise CommentRuleError("A progress update must be posted before confirming a fix")

        comment = self.comments.create(
            report_id=report.id,
            user_id=author.id,
            content=data.content,
            comment_type=comment_type,
            image_url=data.image_url,
        )
        self.session.commit()

        reward_action(self.session, author.id, COMMENT_ACTIONS[comment_type])
        self.report_service.apply_comment_transition(report, comment_type)
        self.session.refresh(comment)
        return comment

    def list_comments(self, report_id: str, viewer_id: str | None) -> list[CommentResponse]:
        """Return visible comments with verification counts fetched in one query."""
        comments = self.comments.list_for_report(report_id)
        fix_ids = [c.id for c in comments if c.comment_type == CommentType.CONFIRM_FIX.value]
        counts = self.comments.verification_counts(fix_ids)
        verified = self.comments.verified_by_user(fix_ids, viewer_id) if viewer_id else set()
        return [
            CommentResponse.model_validate(comment).model_copy(
                update={
                    "verification_count": counts.get(comment.id, 0),
                    "user_verified": comment.id in verified,
                }
            )
            for comment in comments
        ]

    def verify_fix(self, comment: Comment, verifier: Profile) -> VerificationResponse:
        """Record ``verifier``'s endorsement of a confirm_fix comment.

        The verifier earns confirm_fix points. Once the comment reaches the
        verification threshold its author is paid the verified-fix bonus,
        exactly once per comment.
        """
        if comment.comment_type != CommentType.CONFIRM_FIX.value:
            raise CommentRuleError("Only fix confirmations can be verified")
        if comment.user_id == verifier.id:
            raise CommentRuleError("You cannot verify your own fix")

        if not self.comments.add_verification(comment.id, verifier.id):
            self.session.rollback()
            raise AlreadyVerifiedError("You have already verified this fix")
        self.session.commit()

        reward_action(self.session, verifier.id, ActionKind.CONFIRM_FIX)
        bonus_paid = reward_verified_fix(self.session, comment)
        count = self.comments.verification_count(comment.id)
        logger.debug("Comment %s now has %d verifications", comment.id, count)
        return VerificationResponse(
            comment_id=comment.id,
            verification_count=count,
            author_bonus_awarded=bonus_paid,
        )
