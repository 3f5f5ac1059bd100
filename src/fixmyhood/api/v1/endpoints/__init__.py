"""API endpoint routers."""

from .admin import router as admin_router
from .comments import router as comments_router
from .flags import router as flags_router
from .profiles import router as profiles_router
from .reports import router as reports_router
from .uploads import router as uploads_router

__all__ = [
    "admin_router",
    "comments_router",
    "flags_router",
    "profiles_router",
    "reports_router",
    "uploads_router",
]
