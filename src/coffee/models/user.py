# src/coffee/models/user.py
"""SQLAlchemy models for member profiles and identity accounts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from coffee.db.session import Base
from coffee.db.time import new_id, utcnow


class User(Base):
    """Application profile of a member.

    The primary key equals the id of the identity account that owns it.
    ``is_approved`` and ``is_rejected`` are mutually exclusive; the admin
    actions keep them that way.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    full_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Visible to admins only.
    verification_photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    agreed_to_terms: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_rejected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    @property
    def name(self) -> str:
        """Best label to show for the member."""
        return self.display_name or self.full_name or "Someone"

    @property
    def has_completed_agreement(self) -> bool:
        """True once terms, full name and verification photo are all present."""
        return bool(self.agreed_to_terms and self.full_name and self.verification_photo_url)


class AuthAccount(Base):
    """Credentials held by the identity service.

    Kept apart from ``users`` on purpose: a profile row is created lazily on the
    first authenticated request, so an account may exist without one.
    """

    __tablename__ = "auth_accounts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    # Bumped on sign-out; tokens carrying an older version are rejected.
    token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
