# src/coffee/db/time.py
"""Time utilities for database models."""

import time
import uuid
from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def epoch_millis() -> int:
    """Return the current Unix time in milliseconds."""
    return int(time.time() * 1000)


def new_id() -> str:
    """Return a fresh string identifier for primary keys."""
    return str(uuid.uuid4())
