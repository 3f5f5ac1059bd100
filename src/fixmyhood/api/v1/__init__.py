"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    comments_router,
    flags_router,
    profiles_router,
    reports_router,
    uploads_router,
)

__all__ = [
    "admin_router",
    "comments_router",
    "flags_router",
    "profiles_router",
    "reports_router",
    "uploads_router",
]
