# src/coffee/services/admin.py
"""Admin moderation actions over members and posts.

Every action re-reads the caller's own row to confirm admin rights before it
touches anything; nothing here trusts a flag loaded earlier in the request.
Results use the ``{"success": ..., "error": ...}`` shape the admin dashboard
expects.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from coffee.core.errors import CoffeeError, PermissionDeniedError
from coffee.models import Alert, Comment, Notification, Post, User, Vote
from coffee.models.notification import NOTIFICATION_MODERATION
from coffee.services import identity
from coffee.services.notifications import notify
from coffee.services.posts import purge_posts
from coffee.services.users import verify_admin
from coffee.services.votes import refresh_counts

logger = logging.getLogger(__name__)

NOT_ADMIN_MESSAGE = "Unauthorized: Not an admin."

USER_FILTERS = ("all", "pending", "approved", "rejected")


@dataclass(frozen=True)
class ActionResult:
    success: bool
    error: str | None = None

    def as_dict(self) -> dict[str, object]:
        if self.success:
            return {"success": True}
        return {"success": False, "error": self.error}


class AdminService:
    """Moderation actions performed on behalf of an admin caller."""

    def __init__(self, db: Session, *, sleep: Callable[[float], None] = time.sleep) -> None:
        self.db = db
        self.sleep = sleep

    def _require_admin(self, caller_id: str) -> None:
        if not verify_admin(self.db, caller_id, sleep=self.sleep):
            logger.warning("Rejected admin action from non-admin %s", caller_id)
            raise PermissionDeniedError(NOT_ADMIN_MESSAGE, code="not_admin")

    def _update_user(
        self,
        user_id: str,
        values: dict[str, bool],
        action: str,
        *,
        notice: tuple[str, str] | None = None,
    ) -> ActionResult:
        try:
            updated = self.db.query(User).filter(User.id == user_id).update(
                values,
                synchronize_session="fetch",
            )
            if updated and notice is not None:
                title, message = notice
                notify(
                    self.db,
                    user_id=user_id,
                    type=NOTIFICATION_MODERATION,
                    title=title,
                    message=message,
                )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Error during %s for %s: %s", action, user_id, exc, exc_info=True)
            return ActionResult(False, "An unexpected error occurred.")
        if not updated:
            return ActionResult(False, "User not found.")
        logger.info("%s applied to user %s: %s", action, user_id, values)
        return ActionResult(True)

    def approve(self, caller_id: str, user_id: str, approve: bool = True) -> ActionResult:
        """Set approval and always clear rejection.

        ``approve=False`` returns a rejected or approved member to the pending
        queue.
        """
        self._require_admin(caller_id)
        return self._update_user(
            user_id,
            {"is_approved": approve, "is_rejected": False},
            "approval" if approve else "unapproval",
            notice=(
                ("Account approved", "Your account has been approved. Welcome!")
                if approve
                else None
            ),
        )

    def reject(self, caller_id: str, user_id: str) -> ActionResult:
        self._require_admin(caller_id)
        return self._update_user(
            user_id,
            {"is_approved": False, "is_rejected": True},
            "rejection",
            notice=("Account rejected", "Your account application was not approved."),
        )

    def set_admin(self, caller_id: str, user_id: str, is_admin: bool) -> ActionResult:
        self._require_admin(caller_id)
        return self._update_user(user_id, {"is_admin": is_admin}, "admin toggle")

    def delete_user(self, caller_id: str, user_id: str) -> ActionResult:
        """Delete a member and everything that references them.

        The table deletes run in one transaction. Removing the identity account
        afterwards is best effort: a failure there is logged and the action
        still succeeds.
        """
        self._require_admin(caller_id)
        if caller_id == user_id:
            return ActionResult(False, "You cannot delete your own account.")
        db = self.db
        if db.get(User, user_id) is None:
            return ActionResult(False, "User not found.")

        try:
            post_ids = [row[0] for row in db.query(Post.id).filter(Post.user_id == user_id).all()]
            voted_on = [
                row[0]
                for row in db.query(Vote.post_id).filter(Vote.user_id == user_id).distinct().all()
                if row[0] not in post_ids
            ]
            db.query(Vote).filter(Vote.user_id == user_id).delete(synchronize_session="fetch")
            db.query(Comment).filter(Comment.user_id == user_id).delete(
                synchronize_session="fetch"
            )
            db.query(Notification).filter(Notification.user_id == user_id).delete(
                synchronize_session="fetch"
            )
            db.query(Alert).filter(Alert.user_id == user_id).delete(synchronize_session="fetch")
            purge_posts(db, post_ids)
            for post in db.query(Post).filter(Post.id.in_(voted_on)).all():
                refresh_counts(db, post)
            db.query(User).filter(User.id == user_id).delete(synchronize_session="fetch")
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Deleting user %s failed, rolled back: %s", user_id, exc, exc_info=True)
            return ActionResult(False, "An unexpected error occurred during deletion.")

        try:
            identity.delete_account(db, user_id)
        except (CoffeeError, SQLAlchemyError) as exc:
            db.rollback()
            logger.warning("Could not delete identity account %s (non-critical): %s", user_id, exc)

        logger.info("User %s deleted by admin %s (%d posts)", user_id, caller_id, len(post_ids))
        return ActionResult(True)

    def delete_post(self, caller_id: str, post_id: str) -> ActionResult:
        self._require_admin(caller_id)
        db = self.db
        if db.get(Post, post_id) is None:
            return ActionResult(False, "Post not found.")
        try:
            purge_posts(db, [post_id])
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Deleting post %s failed, rolled back: %s", post_id, exc, exc_info=True)
            return ActionResult(False, "An unexpected error occurred.")
        logger.info("Post %s deleted by admin %s", post_id, caller_id)
        return ActionResult(True)

    def list_users(self, caller_id: str, status: str = "all") -> list[User]:
        """Return members newest first, optionally narrowed to one state."""
        self._require_admin(caller_id)
        query = self.db.query(User)
        if status == "pending":
            query = query.filter(User.is_approved.is_(False), User.is_rejected.is_(False))
        elif status == "approved":
            query = query.filter(User.is_approved.is_(True), User.is_rejected.is_(False))
        elif status == "rejected":
            query = query.filter(User.is_rejected.is_(True))
        return query.order_by(User.created_at.desc()).all()

    def list_posts(self, caller_id: str) -> list[Post]:
        self._require_admin(caller_id)
        return self.db.query(Post).order_by(Post.created_at.desc()).all()

    def stats(self, caller_id: str) -> dict[str, int]:
        self._require_admin(caller_id)
        db = self.db

        def count(*criteria) -> int:
            return db.query(func.count(User.id)).filter(*criteria).scalar() or 0

        return {
            "total_users": count(),
            "pending_users": count(User.is_approved.is_(False), User.is_rejected.is_(False)),
            "approved_users": count(User.is_approved.is_(True), User.is_rejected.is_(False)),
            "rejected_users": count(User.is_rejected.is_(True)),
            "admins": count(User.is_admin.is_(True)),
            "awaiting_agreement": count(
                or_(
                    User.agreed_to_terms.is_(False),
                    User.full_name.is_(None),
                    User.verification_photo_url.is_(None),
                )
            ),
            "total_posts": db.query(func.count(Post.id)).scalar() or 0,
        }
