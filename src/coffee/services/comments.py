# src/coffee/services/comments.py
"""Comments on posts."""

from __future__ import annotations

from sqlalchemy.orm import Session

from coffee.core.errors import ValidationError
from coffee.models import Comment, User
from coffee.models.notification import NOTIFICATION_COMMENT
from coffee.services.notifications import notify
from coffee.services.posts import get_post_or_404
from coffee.services.users import require_approved

MAX_COMMENT_LENGTH = 500


def add_comment(db: Session, author: User, post_id: str, content: str) -> Comment:
    """Add a comment and tell the post owner, unless they wrote it themselves."""
    text = (content or "").strip()
    if not text:
        raise ValidationError("Please write something before posting your comment.", code="empty")
    if len(text) > MAX_COMMENT_LENGTH:
        raise ValidationError(
            f"Comments must be {MAX_COMMENT_LENGTH} characters or less.",
            code="too_long",
        )
    require_approved(db, author.id, action="comment")
    post = get_post_or_404(db, post_id)

    comment = Comment(post_id=post.id, user_id=author.id, content=text)
    db.add(comment)
    if post.user_id != author.id:
        notify(
            db,
            user_id=post.user_id,
            type=NOTIFICATION_COMMENT,
            title="New Comment",
            message=f"{author.name} commented on your post about {post.subject_name}",
            related_post_id=post.id,
        )
    db.commit()
    db.refresh(comment)
    return comment


def list_comments(db: Session, post_id: str) -> list[Comment]:
    get_post_or_404(db, post_id)
    return (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc())
        .all()
    )
