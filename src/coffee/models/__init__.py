# src/coffee/models/__init__.py
"""SQLAlchemy models for the Coffee application."""

from .alert import Alert
from .comment import Comment
from .notification import Notification
from .post import Post
from .user import AuthAccount, User
from .vote import Vote

__all__ = [
    "Alert",
    "AuthAccount",
    "Comment",
    "Notification",
    "Post",
    "User",
    "Vote",
]
