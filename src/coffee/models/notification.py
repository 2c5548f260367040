# src/coffee/models/notification.py
"""SQLAlchemy model for in-app notifications."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from coffee.db.session import Base
from coffee.db.time import new_id, utcnow

NOTIFICATION_VOTE = "vote"
NOTIFICATION_COMMENT = "comment"
NOTIFICATION_ALERT = "alert"
NOTIFICATION_MODERATION = "moderation"


class Notification(Base):
    """Message delivered to a single member."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_id_is_read", "user_id", "is_read"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    related_post_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("posts.id"),
        nullable=True,
    )
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
