# src/fixmyhood/api/v1/endpoints/flags.py
"""Endpoints for flagging reports and comments."""

from fastapi import APIRouter, HTTPException, status

from fixmyhood.models import Flag
from fixmyhood.schemas.flag import FlagCreate, FlagResponse
from fixmyhood.services.moderation import FlagTargetNotFoundError, ModerationService

from ..dependencies import ActiveUserDep, RateLimiterDep, SessionDep, enforce_cooldown

router = APIRouter(prefix="/flags", tags=["flags"])


@router.post("/", response_model=FlagResponse, status_code=status.HTTP_201_CREATED)
async def create_flag(
    flag_data: FlagCreate,
    current_user: ActiveUserDep,
    db: SessionDep,
    limiter: RateLimiterDep,
) -> Flag:
    """Ask the moderators to review a report or comment."""
    enforce_cooldown(limiter, "flag", current_user.id)
    try:
        return ModerationService(db).create_flag(
            current_user,
            flag_data.content_type.value,
            flag_data.content_id,
            flag_data.reason,
        )
    except FlagTargetNotFoundError as err:
        limiter.reset("flag", current_user.id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err)) from err
