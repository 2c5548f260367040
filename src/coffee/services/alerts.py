# src/coffee/services/alerts.py
"""Saved search alerts and matching new posts against them."""

from __future__ import annotations

import logging
import re

from sqlalchemy.orm import Session

from coffee.core.errors import NotFoundError, ValidationError
from coffee.models import Alert, Post
from coffee.models.alert import ALERT_TYPES
from coffee.models.notification import NOTIFICATION_ALERT
from coffee.services.notifications import notify

logger = logging.getLogger(__name__)

# Search types map onto the narrower alert types.
SEARCH_TYPE_TO_ALERT = {
    "subject_name": "name",
    "name": "name",
    "city": "location",
    "state": "location",
    "location": "location",
    "phone_number": "phone",
    "phone": "phone",
}


def _digits(value: str | None) -> str:
    return re.sub(r"\D", "", value or "")


def list_alerts(db: Session, user_id: str) -> list[Alert]:
    return (
        db.query(Alert)
        .filter(Alert.user_id == user_id)
        .order_by(Alert.created_at.desc())
        .all()
    )


def create_alert(db: Session, user_id: str, alert_type: str, alert_term: str) -> Alert:
    """Store a new alert for ``user_id``.

    Raises:
        ValidationError: If the type is unknown or the term is blank.
    """
    if alert_type not in ALERT_TYPES:
        raise ValidationError("Invalid alert type provided.", code="invalid_alert_type")
    term = (alert_term or "").strip().lower()
    if not term:
        raise ValidationError("Alert value cannot be empty.", code="empty_alert_term")
    alert = Alert(user_id=user_id, alert_type=alert_type, alert_term=term, is_active=True)
    db.add(alert)
    db.commit()
    db.refresh(alert)
    return alert


def create_alert_from_search(db: Session, user_id: str, search_type: str, term: str) -> Alert | None:
    """Save a search as an alert when the search type has an alert equivalent."""
    alert_type = SEARCH_TYPE_TO_ALERT.get(search_type)
    if alert_type is None or not (term or "").strip():
        return None
    return create_alert(db, user_id, alert_type, term)


def delete_alert(db: Session, user_id: str, alert_id: str) -> None:
    alert = (
        db.query(Alert)
        .filter(Alert.id == alert_id, Alert.user_id == user_id)
        .first()
    )
    if alert is None:
        raise NotFoundError("Alert not found")
    db.delete(alert)
    db.commit()


def alert_matches(alert: Alert, post: Post) -> bool:
    """Return True if ``post`` is what ``alert`` is waiting for."""
    term = alert.alert_term.strip().lower()
    if not term:
        return False
    if alert.alert_type == "name":
        return term in (post.subject_name or "").lower()
    if alert.alert_type == "location":
        return term in (post.city or "").lower() or term in (post.state or "").lower()
    if alert.alert_type == "phone":
        wanted = _digits(term)
        return bool(wanted) and wanted in _digits(post.phone_number)
    return False


def notify_matching_alerts(db: Session, post: Post) -> int:
    """Notify owners of active alerts matching a new post; the caller commits.

    The post author is never notified about their own post, and each member
    gets at most one notification per post.
    """
    candidates = (
        db.query(Alert)
        .filter(Alert.is_active.is_(True), Alert.user_id != post.user_id)
        .all()
    )
    notified: set[str] = set()
    for alert in candidates:
        if alert.user_id in notified or not alert_matches(alert, post):
            continue
        notify(
            db,
            user_id=alert.user_id,
            type=NOTIFICATION_ALERT,
            title="Alert match",
            message=f'A new post about {post.subject_name} matches your alert "{alert.alert_term}"',
            related_post_id=post.id,
        )
        notified.add(alert.user_id)
    if notified:
        logger.info("Post %s matched alerts of %d members", post.id, len(notified))
    return len(notified)
