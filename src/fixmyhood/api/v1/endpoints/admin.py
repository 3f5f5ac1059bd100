# src/fixmyhood/api/v1/endpoints/admin.py
"""Administrator endpoints for moderation and duplicate management."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.orm import Session

from fixmyhood.models import Comment, Flag, FlagStatus, Profile, Report
from fixmyhood.repositories import ReportRepository
from fixmyhood.schemas.admin import (
    AdminCommentPatch,
    AdminPromoteRequest,
    AdminReportPatch,
    AdminUserPatch,
    DuplicateAssignRequest,
)
from fixmyhood.schemas.comment import CommentResponse
from fixmyhood.schemas.flag import FlagResolveRequest, FlagResponse
from fixmyhood.schemas.profile import ProfileResponse
from fixmyhood.schemas.report import ReportResponse
from fixmyhood.services.moderation import AdminCodeError, ModerationService
from fixmyhood.services.reports import DuplicateCycleError, ReportError, ReportService

from ..dependencies import AdminUserDep, CurrentUserDep, SessionDep

router = APIRouter(prefix="/admin", tags=["admin"])


def _report_or_404(db: Session, report_id: str) -> Report:
    report = db.get(Report, report_id)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return report


@router.get("/reports", response_model=list[ReportResponse])
async def list_all_reports(
    admin: AdminUserDep,
    db: SessionDep,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[Report]:
    """Return every report, including hidden ones and duplicates."""
    return ReportRepository(db).list_feed(limit=limit, include_hidden=True, include_duplicates=True)


@router.get("/users", response_model=list[ProfileResponse])
async def list_users(
    admin: AdminUserDep,
    db: SessionDep,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[Profile]:
    return db.query(Profile).order_by(Profile.created_at.desc()).limit(limit).all()


@router.get("/flags", response_model=list[FlagResponse])
async def list_flags(
    admin: AdminUserDep,
    db: SessionDep,
    flag_status: Annotated[FlagStatus | None, Query(alias="status")] = FlagStatus.PENDING,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
) -> list[Flag]:
    return ModerationService(db).list_flags(flag_status.value if flag_status else None, limit)


@router.post("/flags/{flag_id}/resolve", response_model=FlagResponse)
async def resolve_flag(
    flag_id: str,
    resolution: FlagResolveRequest,
    admin: AdminUserDep,
    db: SessionDep,
) -> Flag:
    """Dismiss a flag or hide the flagged content."""
    flag = db.get(Flag, flag_id)
    if flag is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Flag not found")
    return ModerationService(db).resolve_flag(flag, resolution.action)


@router.patch("/reports/{report_id}", response_model=ReportResponse)
async def patch_report(
    report_id: str,
    patch: AdminReportPatch,
    admin: AdminUserDep,
    db: SessionDep,
) -> Report:
    """Hide, lock, or override the status of a report."""
    report = _report_or_404(db, report_id)
    moderation = ModerationService(db)
    if patch.is_hidden is not None:
        report = moderation.set_report_hidden(report, patch.is_hidden)
    if patch.comments_locked is not None:
        report = moderation.set_comments_locked(report, patch.comments_locked)
    if patch.status is not None:
        report = ReportService(db).set_status(report, patch.status, override=True)
    return report


@router.put("/reports/{report_id}/duplicate", response_model=ReportResponse)
async def mark_duplicate(
    report_id: str,
    assignment: DuplicateAssignRequest,
    admin: AdminUserDep,
    db: SessionDep,
) -> Report:
    report = _report_or_404(db, report_id)
    try:
        return ReportService(db).mark_duplicate(report, assignment.original_id)
    except DuplicateCycleError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err
    except ReportError as err:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err


@router.delete("/reports/{report_id}/duplicate", response_model=ReportResponse)
async def clear_duplicate(report_id: str, admin: AdminUserDep, db: SessionDep) -> Report:
    report = _report_or_404(db, report_id)
    return ReportService(db).clear_duplicate(report)


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
async def patch_comment(
    comment_id: str,
    patch: AdminCommentPatch,
    admin: AdminUserDep,
    db: SessionDep,
) -> Comment:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return ModerationService(db).set_comment_hidden(comment, patch.is_hidden)


@router.patch("/users/{user_id}", response_model=ProfileResponse)
async def patch_user(
    user_id: str,
    patch: AdminUserPatch,
    admin: AdminUserDep,
    db: SessionDep,
) -> Profile:
    """Ban or unban a user, or change their admin role."""
    profile = db.get(Profile, user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    if profile.id == admin.id and (patch.is_banned or patch.is_admin is False):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Administrators cannot ban or demote themselves",
        )
    moderation = ModerationService(db)
    if patch.is_banned is not None:
        profile = moderation.set_banned(profile, patch.is_banned)
    if patch.is_admin is not None:
        profile = moderation.set_admin(profile, patch.is_admin)
    return profile


@router.post("/promote", response_model=ProfileResponse)
async def promote_self(request: AdminPromoteRequest, current_user: CurrentUserDep, db: SessionDep) -> Profile:
    """Grant admin rights to the caller when they present the setup code."""
    try:
        return ModerationService(db).promote_with_code(current_user, request.code)
    except AdminCodeError as err:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(err)) from err
