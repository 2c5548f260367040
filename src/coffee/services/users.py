# src/coffee/services/users.py
"""Member profiles: creation on first login, onboarding and self-service edits."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coffee.core.errors import (
    ConfigurationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from coffee.core.settings import settings
from coffee.models import AuthAccount, Post, User
from coffee.services.access import needs_admin_repair
from coffee.services.retry import retry_on_rate_limit
from coffee.services.storage import AVATARS_BUCKET, VERIFICATION_BUCKET, ObjectStore

logger = logging.getLogger(__name__)

Sleep = Callable[[float], None]


@dataclass(frozen=True)
class UploadedFile:
    """Raw bytes of a file received from a client."""

    filename: str | None
    content_type: str | None
    data: bytes

    @property
    def is_empty(self) -> bool:
        return not self.data


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def find_profile(db: Session, account: AuthAccount) -> User | None:
    """Return the profile of ``account``, matching by id and then by email."""
    user = db.get(User, account.id)
    if user is not None:
        return user
    return db.query(User).filter(func.lower(User.email) == account.email.lower()).first()


def ensure_profile(db: Session, account: AuthAccount) -> User:
    """Return the profile of ``account``, creating a minimal one if missing.

    New profiles start unapproved. The configured admin email is created
    approved and admin straight away.
    """
    user = find_profile(db, account)
    if user is not None:
        return user

    is_admin = settings.is_admin_email(account.email)
    user = User(
        id=account.id,
        email=account.email,
        is_approved=is_admin,
        is_rejected=False,
        is_admin=is_admin,
        agreed_to_terms=False,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Another request created the row first.
        db.rollback()
        existing = find_profile(db, account)
        if existing is None:
            raise
        return existing
    db.refresh(user)
    logger.info("Created profile %s (admin=%s)", user.id, is_admin)
    return user


def load_profile(db: Session, account: AuthAccount, *, sleep: Sleep = time.sleep) -> User:
    """Fetch or create the caller's profile, retrying rate-limited reads."""
    return retry_on_rate_limit(
        lambda: ensure_profile(db, account),
        sleep=sleep,
        on_retry=db.rollback,
        operation="profile lookup",
    )


def repair_admin_profile(db: Session, user: User) -> bool:
    """Backfill agreement fields of an approved admin.

    Idempotent: returns False and writes nothing when the row is already
    complete or does not belong to an approved admin.
    """
    if not needs_admin_repair(user):
        return False
    user.agreed_to_terms = True
    user.full_name = user.full_name or settings.admin_placeholder_name
    user.verification_photo_url = (
        user.verification_photo_url or settings.admin_placeholder_photo_url
    )
    db.commit()
    logger.warning("Backfilled missing agreement fields for admin %s", user.id)
    return True


def verify_admin(db: Session, user_id: str, *, sleep: Sleep = time.sleep) -> bool:
    """Re-read ``user_id``'s row and report whether it is an admin.

    Fails closed: any error other than a retried rate limit answers False.
    """
    try:
        is_admin = retry_on_rate_limit(
            lambda: db.query(User.is_admin).filter(User.id == user_id).scalar(),
            sleep=sleep,
            on_retry=db.rollback,
            operation="admin verification",
        )
    except Exception as exc:
        logger.error("Admin verification failed for %s: %s", user_id, exc)
        return False
    return is_admin is True


def require_approved(db: Session, user_id: str, *, action: str = "do this") -> None:
    """Re-read the caller's row and refuse unless it is approved and not rejected."""
    row = db.query(User.is_approved, User.is_rejected).filter(User.id == user_id).first()
    if row is None or not row.is_approved or row.is_rejected:
        raise PermissionDeniedError(f"Your account is not approved to {action}.")


def _validate_agreement(full_name: str | None, agreed_to_terms: bool) -> str:
    name = _clean(full_name)
    if not name:
        raise ValidationError(
            "Please provide your full name and verification photo",
            code="missing_fields",
        )
    if not agreed_to_terms:
        raise ValidationError("You must agree to the terms to continue.", code="terms_required")
    return name


def _apply_agreement(
    db: Session,
    user: User,
    *,
    full_name: str,
    display_name: str | None,
    photo_url: str,
) -> User:
    user.full_name = full_name
    user.display_name = _clean(display_name) or full_name
    user.verification_photo_url = photo_url
    user.agreed_to_terms = True
    db.commit()
    db.refresh(user)
    logger.info("Profile %s completed the agreement and awaits approval", user.id)
    return user


def submit_agreement(
    db: Session,
    store: ObjectStore,
    user: User,
    *,
    full_name: str | None,
    display_name: str | None,
    agreed_to_terms: bool,
    photo: UploadedFile | None,
) -> User:
    """Upload the verification photo, then record the agreement.

    Nothing is written if validation fails; the row is only updated after the
    photo is safely stored.
    """
    name = _validate_agreement(full_name, agreed_to_terms)
    if photo is None or photo.is_empty:
        raise ValidationError(
            "Please provide your full name and verification photo",
            code="missing_fields",
        )
    stored = store.upload(
        VERIFICATION_BUCKET,
        user_id=user.id,
        filename=photo.filename,
        data=photo.data,
        content_type=photo.content_type,
    )
    return _apply_agreement(
        db,
        user,
        full_name=name,
        display_name=display_name,
        photo_url=stored.url,
    )


def submit_agreement_from_upload(
    db: Session,
    store: ObjectStore,
    user: User,
    *,
    full_name: str | None,
    display_name: str | None,
    agreed_to_terms: bool,
    photo_path: str,
) -> User:
    """Record the agreement for a photo uploaded through a signed upload."""
    name = _validate_agreement(full_name, agreed_to_terms)
    path = (photo_path or "").strip()
    if not path.startswith(f"{user.id}/") or ".." in path:
        raise ValidationError("Verification photo path is not valid.", code="invalid_path")
    if not store.object_exists(VERIFICATION_BUCKET, path):
        raise ValidationError("Verification photo has not been uploaded.", code="missing_upload")
    return _apply_agreement(
        db,
        user,
        full_name=name,
        display_name=display_name,
        photo_url=store.public_url(VERIFICATION_BUCKET, path),
    )


def update_profile(
    db: Session,
    store: ObjectStore | None,
    user: User,
    *,
    display_name: str | None = None,
    full_name: str | None = None,
    phone_number: str | None = None,
    avatar: UploadedFile | None = None,
) -> User:
    """Apply self-service edits.

    ``None`` leaves a field untouched and an empty string clears it. The full
    name is part of the verification record and can be changed but not cleared.
    """
    avatar_url: str | None = None
    if avatar is not None and not avatar.is_empty:
        if store is None:
            raise ConfigurationError("Server is missing storage configuration.")
        avatar_url = store.upload(
            AVATARS_BUCKET,
            user_id=user.id,
            filename=avatar.filename,
            data=avatar.data,
            content_type=avatar.content_type,
        ).url

    if display_name is not None:
        user.display_name = _clean(display_name)
    if full_name is not None and _clean(full_name):
        user.full_name = _clean(full_name)
    if phone_number is not None:
        user.phone_number = _clean(phone_number)
    if avatar_url:
        user.avatar_url = avatar_url
    db.commit()
    db.refresh(user)
    return user


def get_member(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def list_member_posts(db: Session, user_id: str) -> list[Post]:
    return (
        db.query(Post)
        .filter(Post.user_id == user_id)
        .order_by(Post.created_at.desc())
        .all()
    )
