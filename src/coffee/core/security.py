"""Password hashing and session token helpers."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import nacl.pwhash
from jose import JWTError, jwt
from nacl.exceptions import InvalidkeyError

from coffee.core.settings import settings


def hash_password(password: str) -> str:
    """Return an Argon2id hash of ``password`` suitable for storage."""
    return nacl.pwhash.str(password.encode("utf-8")).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a hash produced by :func:`hash_password`."""
    try:
        return nacl.pwhash.verify(password_hash.encode("ascii"), password.encode("utf-8"))
    except InvalidkeyError:
        return False


def create_access_token(
    subject: str,
    *,
    email: str,
    token_version: int,
    expires_delta: timedelta | None = None,
) -> str:
    """Issue a signed JWT for an identity account.

    Args:
        subject: Identity account id placed in the ``sub`` claim.
        email: Account email, carried for session lookups.
        token_version: Current revocation counter of the account.
        expires_delta: Optional lifetime override.
    """
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload: dict[str, Any] = {
        "sub": subject,
        "email": email,
        "ver": token_version,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Return the claims of a valid token, or None if it fails verification."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
