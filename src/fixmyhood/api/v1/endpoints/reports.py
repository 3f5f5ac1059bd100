# src/fixmyhood/api/v1/endpoints/reports.py
"""Report-related endpoints for the FixMyHood API."""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from fixmyhood.models import Profile, Report, ReportCategory, ReportStatus
from fixmyhood.repositories import ReportRepository
from fixmyhood.schemas.report import (
    DuplicateDraft,
    DuplicateMatch,
    ReportCreate,
    ReportDetailResponse,
    ReportResponse,
    ReportUpdate,
)
from fixmyhood.services.duplicates import DuplicateCheckDebouncer, DuplicateDetector
from fixmyhood.services.reports import ReportPermissionError, ReportService, ReportStatusError

from ..dependencies import (
    ActiveUserDep,
    BlobStoreDep,
    OptionalUserDep,
    RateLimiterDep,
    SessionDep,
    enforce_cooldown,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


def get_report_or_404(db: Session, report_id: str, viewer: Profile | None = None) -> Report:
    """Return a report, hiding moderated reports from everyone but admins."""
    report = db.get(Report, report_id)
    if report is None or (report.is_hidden and not (viewer is not None and viewer.is_admin)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return report


def _detail(db: Session, report: Report, viewer: Profile | None) -> ReportDetailResponse:
    reports = ReportRepository(db)
    return ReportDetailResponse.model_validate(report).model_copy(
        update={
            "followers_count": reports.followers_count(report.id),
            "views_count": reports.views_count(report.id),
            "is_following": viewer is not None and reports.is_following(report.id, viewer.id),
            "has_verified_fix": ReportService(db).has_verified_fix(report.id),
        }
    )


@router.get("/", response_model=list[ReportResponse])
async def list_reports(
    db: SessionDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    category: ReportCategory | None = None,
    report_status: Annotated[ReportStatus | None, Query(alias="status")] = None,
) -> list[Report]:
    """Return the public feed, newest first."""
    return ReportRepository(db).list_feed(
        limit=limit,
        category=category.value if category else None,
        status=report_status.value if report_status else None,
    )


@router.get("/duplicates", response_model=list[DuplicateMatch])
async def check_duplicates(
    db: SessionDep,
    title: str = "",
    category: str = "",
    latitude: Annotated[float | None, Query(ge=-90, le=90)] = None,
    longitude: Annotated[float | None, Query(ge=-180, le=180)] = None,
) -> list[DuplicateMatch]:
    """Suggest existing reports that a draft may duplicate."""
    return DuplicateDetector(db).find_potential_duplicates(title, category, latitude, longitude)


@router.websocket("/duplicates/ws")
async def duplicates_stream(websocket: WebSocket, db: SessionDep) -> None:
    """Stream duplicate suggestions while a draft is edited.

    Each message is a draft; a check runs once the client has been quiet for
    the debounce window and its matches are sent back as ``{"matches": [...]}``.
    """
    await websocket.accept()
    detector = DuplicateDetector(db)
    session_lock = asyncio.Lock()

    async def run_check(draft: DuplicateDraft) -> list[DuplicateMatch]:
        async with session_lock:
            return await asyncio.to_thread(
                detector.check_draft,
                draft.title,
                draft.category,
                draft.latitude,
                draft.longitude,
            )

    async def send_matches(matches: list[DuplicateMatch]) -> None:
        await websocket.send_json({"matches": [m.model_dump() for m in matches]})

    debouncer: DuplicateCheckDebouncer[list[DuplicateMatch]] = DuplicateCheckDebouncer(
        run_check, on_result=send_matches
    )
    try:
        while True:
            try:
                draft = DuplicateDraft.model_validate(await websocket.receive_json())
            except (ValidationError, ValueError):
                await websocket.send_json({"error": "Invalid draft"})
                continue
            debouncer.schedule(draft)
    except WebSocketDisconnect:
        logger.debug("Duplicate stream closed")
    finally:
        await debouncer.close()


@router.post("/", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    report_data: ReportCreate,
    current_user: ActiveUserDep,
    db: SessionDep,
    limiter: RateLimiterDep,
) -> Report:
    """Submit a new report."""
    enforce_cooldown(limiter, "report", current_user.id)
    return ReportService(db).create_report(current_user, report_data)


@router.get("/{report_id}", response_model=ReportDetailResponse)
async def get_report(report_id: str, db: SessionDep, viewer: OptionalUserDep) -> ReportDetailResponse:
    """Return a report with engagement counters, recording the caller's view."""
    report = get_report_or_404(db, report_id, viewer)
    if viewer is not None:
        ReportRepository(db).record_view(report.id, viewer.id)
        db.commit()
    return _detail(db, report, viewer)


@router.patch("/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: str,
    report_data: ReportUpdate,
    current_user: ActiveUserDep,
    db: SessionDep,
    blob_store: BlobStoreDep,
) -> Report:
    report = get_report_or_404(db, report_id, current_user)
    try:
        return ReportService(db, blob_store).update_report(report, current_user, report_data)
    except ReportPermissionError as err:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(err)) from err


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(
    report_id: str,
    current_user: ActiveUserDep,
    db: SessionDep,
    blob_store: BlobStoreDep,
) -> Response:
    report = get_report_or_404(db, report_id, current_user)
    try:
        ReportService(db, blob_store).delete_report(report, current_user)
    except ReportPermissionError as err:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(err)) from err
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{report_id}/close", response_model=ReportResponse)
async def close_report(report_id: str, current_user: ActiveUserDep, db: SessionDep) -> Report:
    """Close a report once one of its fixes has been verified by neighbours."""
    report = get_report_or_404(db, report_id, current_user)
    try:
        return ReportService(db).close_report(report, current_user)
    except ReportPermissionError as err:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(err)) from err
    except ReportStatusError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err)) from err


@router.post("/{report_id}/follow", status_code=status.HTTP_204_NO_CONTENT)
async def follow_report(report_id: str, current_user: ActiveUserDep, db: SessionDep) -> Response:
    report = get_report_or_404(db, report_id, current_user)
    ReportRepository(db).add_follower(report.id, current_user.id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{report_id}/follow", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow_report(report_id: str, current_user: ActiveUserDep, db: SessionDep) -> Response:
    report = get_report_or_404(db, report_id, current_user)
    ReportRepository(db).remove_follower(report.id, current_user.id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
