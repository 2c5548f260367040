# src/coffee/services/retry.py
"""Bounded retries for rate-limited store reads."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from coffee.core.errors import RateLimitedError
from coffee.core.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fallback for drivers that only report rate limiting in their message text.
RATE_LIMIT_MARKERS = ("rate limit", "rate-limit", "ratelimit", "too many")


def is_rate_limited(exc: BaseException) -> bool:
    """Return True if ``exc`` signals a transient rate limit."""
    if isinstance(exc, RateLimitedError):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


def retry_on_rate_limit(
    func: Callable[[], T],
    *,
    attempts: int | None = None,
    backoff_seconds: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Callable[[], None] | None = None,
    operation: str = "store read",
) -> T:
    """Call ``func`` and retry it while it fails with a rate-limit error.

    The wait before retry ``n`` is ``backoff_seconds * n``. Any other error,
    and the last rate-limit error once ``attempts`` are used up, propagates to
    the caller.

    ``on_retry`` runs before each new attempt, e.g. ``session.rollback`` so a
    failed write does not leave pending rows behind for the next attempt.
    """
    max_attempts = max(1, attempts if attempts is not None else settings.rate_limit_max_attempts)
    backoff = (
        backoff_seconds if backoff_seconds is not None else settings.rate_limit_backoff_seconds
    )

    for attempt in range(1, max_attempts + 1):
        try:
            return func()
        except Exception as exc:
            if not is_rate_limited(exc) or attempt >= max_attempts:
                raise
            logger.warning(
                "%s rate limited (attempt %d/%d): %s",
                operation,
                attempt,
                max_attempts,
                exc,
            )
            if on_retry is not None:
                on_retry()
            sleep(backoff * attempt)

    raise RuntimeError("unreachable")  # pragma: no cover
