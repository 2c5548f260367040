"""Domain exceptions raised by Coffee services.

Services raise these instead of ``HTTPException`` so they can be reused outside
of a request. ``coffee.main`` registers handlers that turn them into JSON
responses; ``status_code`` is the HTTP status used there.
"""

from __future__ import annotations


class CoffeeError(Exception):
    """Base class for all application errors."""

    status_code = 400
    code = "error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class NotFoundError(CoffeeError):
    status_code = 404
    code = "not_found"


class PermissionDeniedError(CoffeeError):
    status_code = 403
    code = "forbidden"


class ValidationError(CoffeeError):
    status_code = 400
    code = "invalid"


class ConflictError(CoffeeError):
    status_code = 409
    code = "conflict"


class IdentityError(CoffeeError):
    """Authentication failures reported by the identity service."""

    status_code = 401
    code = "invalid_credentials"


class StorageError(CoffeeError):
    """The object store rejected or failed an operation."""

    status_code = 502
    code = "storage_error"


class ConfigurationError(CoffeeError):
    """Required configuration is missing."""

    status_code = 500
    code = "configuration_error"


class RateLimitedError(CoffeeError):
    """A backing store refused the request because of rate limiting."""

    status_code = 429
    code = "rate_limited"


class AccessRedirect(Exception):
    """Raised by the route guard when the caller must be sent elsewhere.

    Attributes:
        location: Page the caller should be redirected to.
        reason: Human readable explanation.
        authenticated: False when the caller has no valid session.
    """

    def __init__(self, location: str, reason: str, *, authenticated: bool = True) -> None:
        super().__init__(reason)
        self.location = location
        self.reason = reason
        self.authenticated = authenticated
