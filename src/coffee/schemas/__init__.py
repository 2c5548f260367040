# src/coffee/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .admin import AdminStats, AdminToggleRequest, ApprovalRequest
from .alert import AlertCreate, AlertResponse
from .comment import CommentCreate, CommentResponse
from .common import ActionResult
from .notification import NotificationResponse
from .post import PostCreate, PostResponse
from .user import LoginRequest, ProfileResponse, SignupRequest
from .vote import VoteCreate, VoteResponse

__all__ = [
    "ActionResult",
    "AdminStats", "AdminToggleRequest", "ApprovalRequest",
    "AlertCreate", "AlertResponse",
    "CommentCreate", "CommentResponse",
    "LoginRequest", "ProfileResponse", "SignupRequest",
    "NotificationResponse",
    "PostCreate", "PostResponse",
    "VoteCreate", "VoteResponse",
]
