# src/coffee/services/notifications.py
"""Creating and reading member notifications."""

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from coffee.core.errors import NotFoundError
from coffee.models import Notification


def notify(
    db: Session,
    *,
    user_id: str,
    type: str,
    title: str,
    message: str,
    related_post_id: str | None = None,
) -> Notification:
    """Queue a notification on the session; the caller commits."""
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        related_post_id=related_post_id,
        is_read=False,
    )
    db.add(notification)
    return notification


def list_notifications(db: Session, user_id: str, *, limit: int = 100) -> list[Notification]:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .all()
    )


def unread_count(db: Session, user_id: str) -> int:
    return (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .scalar()
        or 0
    )


def mark_all_read(db: Session, user_id: str) -> int:
    """Mark every unread notification of ``user_id`` as read; return how many changed."""
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session="fetch")
    )
    db.commit()
    return updated


def mark_read(db: Session, user_id: str, notification_id: str) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if notification is None:
        raise NotFoundError("Notification not found")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification
