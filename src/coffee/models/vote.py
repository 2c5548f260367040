# src/coffee/models/vote.py
"""Models capturing green/red flag votes on posts."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from coffee.db.session import Base
from coffee.db.time import new_id, utcnow

VOTE_GREEN = "green"
VOTE_RED = "red"


class Vote(Base):
    """Per-user flag on a post.

    The unique constraint keeps one active vote per (post, user).
    """

    __tablename__ = "votes"
    __table_args__ = (
        CheckConstraint("vote_type IN ('green', 'red')", name="ck_votes_vote_type"),
        UniqueConstraint("post_id", "user_id", name="uq_votes_post_user"),
        Index("ix_votes_user_id", "user_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
    )
    vote_type: Mapped[str] = mapped_column(String(8), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
