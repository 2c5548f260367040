# src/coffee/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .agreement import router as agreement_router
from .alerts import router as alerts_router
from .auth import router as auth_router
from .comments import router as comments_router
from .debug import router as debug_router
from .notifications import router as notifications_router
from .posts import router as posts_router
from .profile import router as profile_router
from .search import router as search_router
from .system import router as system_router
from .users import router as users_router
from .votes import router as votes_router

__all__ = [
    "admin_router",
    "agreement_router",
    "alerts_router",
    "auth_router",
    "comments_router",
    "debug_router",
    "notifications_router",
    "posts_router",
    "profile_router",
    "search_router",
    "system_router",
    "users_router",
    "votes_router",
]
