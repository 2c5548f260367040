# src/coffee/services/posts.py
"""Post creation, listing, search and cascading deletes."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from coffee.core.errors import NotFoundError, PermissionDeniedError
from coffee.core.settings import settings
from coffee.models import Comment, Notification, Post, User, Vote
from coffee.schemas.post import PostCreate
from coffee.services import alerts as alert_service
from coffee.services.storage import POST_IMAGES_BUCKET, ObjectStore, StoredObject
from coffee.services.users import UploadedFile, require_approved

logger = logging.getLogger(__name__)

MAX_POST_PHOTO_BYTES = 5 * 1024 * 1024
SEARCH_TYPES = ("subject_name", "caption", "city", "state", "phone_number", "all")


@dataclass(frozen=True)
class FeedPage:
    posts: list[Post]
    page: int
    page_size: int
    total_posts: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_posts / self.page_size) if self.page_size else 0


@dataclass(frozen=True)
class PostDetail:
    post: Post
    comments: list[Comment]
    my_vote: str | None


def get_post_or_404(db: Session, post_id: str) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


def create_post(db: Session, author: User, data: PostCreate) -> Post:
    """Insert a post for an approved member and fire matching alerts.

    Raises:
        PermissionDeniedError: If the author's row is not approved.
    """
    require_approved(db, author.id, action="create posts")

    post = Post(
        user_id=author.id,
        subject_name=data.subject_name,
        subject_age=data.subject_age,
        city=data.city,
        state=data.state,
        phone_number=data.phone_number,
        caption=data.caption,
        photos=list(data.photos),
        green_flags=0,
        red_flags=0,
    )
    db.add(post)
    db.flush()
    matched = alert_service.notify_matching_alerts(db, post)
    db.commit()
    db.refresh(post)
    logger.info("Post %s created by %s (%d alert matches)", post.id, author.id, matched)
    return post


def upload_post_photo(store: ObjectStore, author: User, photo: UploadedFile) -> StoredObject:
    """Store one post photo; posts reference the returned public URL."""
    return store.upload(
        POST_IMAGES_BUCKET,
        user_id=author.id,
        filename=photo.filename,
        data=photo.data,
        content_type=photo.content_type,
        max_bytes=MAX_POST_PHOTO_BYTES,
    )


def get_feed(db: Session, page: int = 1, page_size: int | None = None) -> FeedPage:
    """Return one page of the feed, newest first."""
    size = page_size or settings.feed_page_size
    page = max(page, 1)
    total = db.query(func.count(Post.id)).scalar() or 0
    posts = (
        db.query(Post)
        .order_by(Post.created_at.desc(), Post.id)
        .offset((page - 1) * size)
        .limit(size)
        .all()
    )
    return FeedPage(posts=posts, page=page, page_size=size, total_posts=total)


def get_post_detail(db: Session, post_id: str, viewer_id: str) -> PostDetail:
    post = get_post_or_404(db, post_id)
    comments = (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc())
        .all()
    )
    my_vote = (
        db.query(Vote.vote_type)
        .filter(Vote.post_id == post_id, Vote.user_id == viewer_id)
        .scalar()
    )
    return PostDetail(post=post, comments=comments, my_vote=my_vote)


def swipe_queue(db: Session, user_id: str, *, limit: int = 50) -> list[Post]:
    """Posts by other members that ``user_id`` has not voted on yet."""
    voted = select(Vote.post_id).where(Vote.user_id == user_id)
    return (
        db.query(Post)
        .filter(Post.user_id != user_id, Post.id.not_in(voted))
        .order_by(Post.created_at.desc())
        .limit(limit)
        .all()
    )


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_posts(
    db: Session,
    *,
    term: str | None = None,
    search_type: str = "all",
    city: str | None = None,
    state: str | None = None,
    phone: str | None = None,
    limit: int | None = None,
) -> list[Post]:
    """Case-insensitive substring search over posts, newest first."""
    query = db.query(Post)
    term = (term or "").strip()
    if term:
        pattern = _like(term)
        columns = {
            "subject_name": Post.subject_name,
            "caption": Post.caption,
            "city": Post.city,
            "state": Post.state,
            "phone_number": Post.phone_number,
        }
        if search_type in columns:
            query = query.filter(columns[search_type].ilike(pattern, escape="\\"))
        else:
            query = query.filter(
                or_(*(column.ilike(pattern, escape="\\") for column in columns.values()))
            )
    if city and city.strip():
        query = query.filter(Post.city.ilike(_like(city.strip()), escape="\\"))
    if state and state.strip() and state.strip().lower() != "any":
        query = query.filter(Post.state.ilike(_like(state.strip()), escape="\\"))
    if phone and phone.strip():
        query = query.filter(Post.phone_number.ilike(_like(phone.strip()), escape="\\"))

    return (
        query.order_by(Post.created_at.desc())
        .limit(limit or settings.search_result_limit)
        .all()
    )


def purge_posts(db: Session, post_ids: list[str]) -> None:
    """Delete posts and every row that references them. The caller commits."""
    if not post_ids:
        return
    db.query(Vote).filter(Vote.post_id.in_(post_ids)).delete(synchronize_session="fetch")
    db.query(Comment).filter(Comment.post_id.in_(post_ids)).delete(synchronize_session="fetch")
    db.query(Notification).filter(Notification.related_post_id.in_(post_ids)).delete(
        synchronize_session="fetch"
    )
    db.query(Post).filter(Post.id.in_(post_ids)).delete(synchronize_session="fetch")


def delete_own_post(db: Session, user: User, post_id: str) -> None:
    """Delete a post owned by ``user`` together with its votes and comments."""
    post = get_post_or_404(db, post_id)
    if post.user_id != user.id:
        raise PermissionDeniedError("You can only delete your own posts")
    try:
        purge_posts(db, [post.id])
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Post %s deleted by its owner %s", post_id, user.id)
