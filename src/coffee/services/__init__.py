# src/coffee/services/__init__.py
"""Business logic services for the Coffee application."""

from .admin import ActionResult, AdminService
from .identity import IssuedSession
from .storage import ObjectStore
from .votes import VoteOutcome

__all__ = [
    "ActionResult",
    "AdminService",
    "IssuedSession",
    "ObjectStore",
    "VoteOutcome",
]
