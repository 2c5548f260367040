# src/coffee/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    agreement_router,
    alerts_router,
    auth_router,
    comments_router,
    debug_router,
    notifications_router,
    posts_router,
    profile_router,
    search_router,
    system_router,
    users_router,
    votes_router,
)

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
