"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from fixmyhood.core.security import decode_access_token
from fixmyhood.core.settings import settings
from fixmyhood.db.session import get_db
from fixmyhood.models import Profile
from fixmyhood.services.rate_limit import RateLimiter, get_rate_limiter
from fixmyhood.services.storage import LocalBlobStore, get_blob_store

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_rate_limiter_dep() -> RateLimiter:
    """Return the shared rate limiter."""
    return get_rate_limiter()


def get_blob_store_dep() -> LocalBlobStore:
    """Return the shared blob store."""
    return get_blob_store()


RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter_dep)]
BlobStoreDep = Annotated[LocalBlobStore, Depends(get_blob_store_dep)]


def _claims_from_token(token: str) -> dict[str, Any]:
    try:
        payload = decode_access_token(token)
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err
    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return payload


def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> dict[str, Any]:
    """Return validated claims of the caller's access token.

    Raises:
        HTTPException: If the token is invalid or has no subject
    """
    return _claims_from_token(credentials.credentials)


ClaimsDep = Annotated[dict[str, Any], Depends(get_token_claims)]


def get_current_user(claims: ClaimsDep, db: SessionDep) -> Profile:
    """Get the profile of the authenticated caller.

    Raises:
        HTTPException: If no profile exists yet for the token subject
    """
    profile = db.get(Profile, str(claims["sub"]))
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Profile not found",
        )
    return profile


CurrentUserDep = Annotated[Profile, Depends(get_current_user)]


def get_active_user(current_user: CurrentUserDep) -> Profile:
    """Reject banned users from write endpoints."""
    if current_user.is_banned:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been suspended",
        )
    return current_user


ActiveUserDep = Annotated[Profile, Depends(get_active_user)]


def get_admin_user(current_user: CurrentUserDep) -> Profile:
    """Allow only administrators."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return current_user


AdminUserDep = Annotated[Profile, Depends(get_admin_user)]


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)],
    db: SessionDep,
) -> Profile | None:
    """Return the caller's profile when a valid token is presented, else None."""
    if credentials is None:
        return None
    claims = _claims_from_token(credentials.credentials)
    return db.get(Profile, str(claims["sub"]))


OptionalUserDep = Annotated[Profile | None, Depends(get_optional_user)]


def enforce_cooldown(limiter: RateLimiter, action: str, user_id: str) -> None:
    """Raise 429 while ``user_id`` is cooling down from ``action``."""
    result = limiter.hit(action, user_id, settings.cooldowns[action])
    if not result.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Please wait {result.retry_after_seconds} seconds before trying again",
            headers={"Retry-After": str(result.retry_after_seconds)},
        )
