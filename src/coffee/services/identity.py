# src/coffee/services/identity.py
"""Identity accounts: sign-up, sign-in, sign-out and session lookup.

The identity service is separate from member profiles. It knows
emails, password hashes and token versions; approval state lives on
``coffee.models.User``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coffee.core import security
from coffee.core.errors import ConflictError, IdentityError, NotFoundError, ValidationError
from coffee.core.settings import settings
from coffee.models import AuthAccount

logger = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class IssuedSession:
    """Token handed back to a client after sign-up or sign-in."""

    account: AuthAccount
    access_token: str
    token_type: str = "bearer"


def normalize_email(email: str) -> str:
    """Trim and lower-case an email, rejecting obviously malformed input."""
    cleaned = (email or "").strip().lower()
    if not _EMAIL_PATTERN.match(cleaned):
        raise ValidationError("Please enter a valid email address.", code="invalid_email")
    return cleaned


def _issue(account: AuthAccount) -> IssuedSession:
    token = security.create_access_token(
        account.id,
        email=account.email,
        token_version=account.token_version,
    )
    return IssuedSession(account=account, access_token=token)


def get_account_by_email(db: Session, email: str) -> AuthAccount | None:
    return (
        db.query(AuthAccount)
        .filter(func.lower(AuthAccount.email) == email.strip().lower())
        .first()
    )


def sign_up(db: Session, email: str, password: str) -> IssuedSession:
    """Create an identity account and return a session for it.

    Raises:
        ValidationError: If the email or password is unacceptable.
        ConflictError: If an account already exists for the email.
    """
    normalized = normalize_email(email)
    if len(password or "") < settings.min_password_length:
        raise ValidationError(
            f"Password must be at least {settings.min_password_length} characters.",
            code="weak_password",
        )
    if get_account_by_email(db, normalized) is not None:
        raise ConflictError("An account with this email already exists.", code="email_taken")

    account = AuthAccount(email=normalized, password_hash=security.hash_password(password))
    db.add(account)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            "An account with this email already exists.",
            code="email_taken",
        ) from exc
    db.refresh(account)
    logger.info("Created identity account %s", account.id)
    return _issue(account)


def sign_in(db: Session, email: str, password: str) -> IssuedSession:
    """Verify credentials and return a fresh session."""
    account = get_account_by_email(db, email or "")
    if account is None or not security.verify_password(password or "", account.password_hash):
        raise IdentityError("Invalid email or password.")
    return _issue(account)


def sign_out(db: Session, account: AuthAccount) -> None:
    """Revoke every token issued to ``account`` so far."""
    account.token_version += 1
    db.commit()
    logger.info("Revoked sessions for identity account %s", account.id)


def resolve_token(db: Session, token: str | None) -> AuthAccount | None:
    """Return the account a token belongs to, or None if the token is not valid."""
    if not token:
        return None
    claims = security.decode_access_token(token)
    if not claims or "sub" not in claims:
        return None
    account = db.get(AuthAccount, claims["sub"])
    if account is None or claims.get("ver") != account.token_version:
        return None
    return account


def delete_account(db: Session, account_id: str) -> None:
    """Remove an identity account (privileged).

    Raises:
        NotFoundError: If there is no account with this id.
    """
    account = db.get(AuthAccount, account_id)
    if account is None:
        raise NotFoundError("Identity account not found.")
    db.delete(account)
    db.commit()
    logger.info("Deleted identity account %s", account_id)
