# src/coffee/models/post.py
"""SQLAlchemy model for posts."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coffee.db.session import Base
from coffee.db.time import new_id, utcnow


class Post(Base):
    """A member's post about a third party.

    ``green_flags`` and ``red_flags`` are recomputed from the ``votes`` table
    in the same transaction as every vote write.
    """

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    subject_name: Mapped[str] = mapped_column(Text, nullable=False)
    subject_age: Mapped[int] = mapped_column(Integer, nullable=False)
    city: Mapped[str | None] = mapped_column(Text, nullable=True)
    state: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    caption: Mapped[str] = mapped_column(Text, nullable=False)
    photos: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    green_flags: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    red_flags: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    author = relationship("User", lazy="joined")
