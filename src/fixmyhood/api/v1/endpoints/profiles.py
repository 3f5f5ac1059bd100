# src/fixmyhood/api/v1/endpoints/profiles.py
"""Profile, badge and leaderboard endpoints for the FixMyHood API."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from fixmyhood.models import Profile
from fixmyhood.repositories import BadgeRepository, ProfileRepository, ReportRepository
from fixmyhood.schemas.profile import (
    BadgeResponse,
    FrameUpdateRequest,
    ProfileResponse,
    PublicProfileResponse,
)
from fixmyhood.services.profiles import FrameLockedError, ProfileService

from ..dependencies import ClaimsDep, CurrentUserDep, SessionDep

router = APIRouter(prefix="/profiles", tags=["profiles"])


def _own_profile(db: Session, profile: Profile) -> ProfileResponse:
    badges = BadgeRepository(db).list_for_user(profile.id)
    return ProfileResponse.model_validate(profile).model_copy(
        update={
            "badges": [BadgeResponse.model_validate(b) for b in badges],
            "unlocked_frames": [f.value for f in ProfileService(db).unlocked_frames_for(profile.id)],
        }
    )


@router.post("/me", response_model=ProfileResponse)
async def bootstrap_profile(claims: ClaimsDep, db: SessionDep, response: Response) -> ProfileResponse:
    """Create the caller's profile on first sign-in; returns the existing one otherwise."""
    profile, created = ProfileService(db).ensure_profile(str(claims["sub"]), claims)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return _own_profile(db, profile)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(current_user: CurrentUserDep, db: SessionDep) -> ProfileResponse:
    return _own_profile(db, current_user)


@router.patch("/me/frame", response_model=ProfileResponse)
async def set_frame(
    frame_data: FrameUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ProfileResponse:
    """Select one of the caller's unlocked profile frames."""
    try:
        profile = ProfileService(db).set_active_frame(current_user, frame_data.frame)
    except FrameLockedError as err:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(err)) from err
    return _own_profile(db, profile)


@router.get("/leaderboard", response_model=list[PublicProfileResponse])
async def leaderboard(
    db: SessionDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> list[Profile]:
    """Return the highest-scoring neighbours."""
    return ProfileRepository(db).leaderboard(limit)


@router.get("/{profile_id}", response_model=PublicProfileResponse)
async def get_profile(profile_id: str, db: SessionDep) -> PublicProfileResponse:
    profile = ProfileRepository(db).get_by_id(profile_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    badges = BadgeRepository(db).list_for_user(profile.id)
    return PublicProfileResponse.model_validate(profile).model_copy(
        update={
            "badges": [BadgeResponse.model_validate(b) for b in badges],
            "report_count": ReportRepository(db).count_by_creator(profile.id),
        }
    )
