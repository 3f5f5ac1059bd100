# src/fixmyhood/api/v1/endpoints/comments.py
"""Comment and fix-verification endpoints for the FixMyHood API."""

from fastapi import APIRouter, HTTPException, status

from fixmyhood.models import Comment
from fixmyhood.repositories import CommentRepository
from fixmyhood.schemas.comment import CommentCreate, CommentResponse, VerificationResponse
from fixmyhood.services.comments import (
    AlreadyVerifiedError,
    CommentClosedError,
    CommentRuleError,
    CommentService,
)

from ..dependencies import ActiveUserDep, OptionalUserDep, RateLimiterDep, SessionDep, enforce_cooldown
from .reports import get_report_or_404

router = APIRouter(tags=["comments"])


@router.get("/reports/{report_id}/comments", response_model=list[CommentResponse])
async def list_comments(report_id: str, db: SessionDep, viewer: OptionalUserDep) -> list[CommentResponse]:
    """Return visible comments oldest first, with fix verification state."""
    report = get_report_or_404(db, report_id, viewer)
    return CommentService(db).list_comments(report.id, viewer.id if viewer else None)


@router.post(
    "/reports/{report_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_comment(
    report_id: str,
    comment_data: CommentCreate,
    current_user: ActiveUserDep,
    db: SessionDep,
    limiter: RateLimiterDep,
) -> Comment:
    """Post a comment, progress update or fix confirmation."""
    report = get_report_or_404(db, report_id, current_user)
    enforce_cooldown(limiter, "comment", current_user.id)
    try:
        return CommentService(db).post_comment(report, current_user, comment_data)
    except CommentClosedError as err:
        limiter.reset("comment", current_user.id)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err
    except CommentRuleError as err:
        limiter.reset("comment", current_user.id)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err


@router.post("/comments/{comment_id}/verify", response_model=VerificationResponse)
async def verify_fix(comment_id: str, current_user: ActiveUserDep, db: SessionDep) -> VerificationResponse:
    """Endorse a neighbour's claim that the issue has been fixed."""
    comment = CommentRepository(db).get_by_id(comment_id)
    if comment is None or comment.is_hidden:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    try:
        return CommentService(db).verify_fix(comment, current_user)
    except AlreadyVerifiedError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err
    except CommentRuleError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
