# src/coffee/services/votes.py
"""Green/red flag voting with toggle semantics."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coffee.core.errors import ConflictError
from coffee.models import Post, User, Vote
from coffee.models.notification import NOTIFICATION_VOTE
from coffee.models.vote import VOTE_GREEN, VOTE_RED
from coffee.services.notifications import notify
from coffee.services.posts import get_post_or_404
from coffee.services.users import require_approved

logger = logging.getLogger(__name__)

VOTE_CREATED = "created"
VOTE_CHANGED = "changed"
VOTE_REMOVED = "removed"


@dataclass(frozen=True)
class VoteOutcome:
    action: str
    vote_type: str | None
    green_flags: int
    red_flags: int


def _flag_label(vote_type: str) -> str:
    return "green flag" if vote_type == VOTE_GREEN else "red flag"


def refresh_counts(db: Session, post: Post) -> None:
    """Recompute the post's flag counts from the votes table."""
    db.flush()
    rows = (
        db.query(Vote.vote_type, func.count(Vote.id))
        .filter(Vote.post_id == post.id)
        .group_by(Vote.vote_type)
        .all()
    )
    counts = dict(rows)
    post.green_flags = counts.get(VOTE_GREEN, 0)
    post.red_flags = counts.get(VOTE_RED, 0)


def cast_vote(db: Session, voter: User, post_id: str, vote_type: str) -> VoteOutcome:
    """Apply a vote.

    The first vote inserts, voting the same type again removes it and voting
    the other type switches it. Only a fresh vote on someone else's post
    notifies the post owner.
    """
    require_approved(db, voter.id, action="vote")
    post = get_post_or_404(db, post_id)

    existing = (
        db.query(Vote)
        .filter(Vote.post_id == post_id, Vote.user_id == voter.id)
        .first()
    )

    if existing is not None and existing.vote_type == vote_type:
        db.delete(existing)
        action, current = VOTE_REMOVED, None
    elif existing is not None:
        existing.vote_type = vote_type
        action, current = VOTE_CHANGED, vote_type
    else:
        db.add(Vote(post_id=post_id, user_id=voter.id, vote_type=vote_type))
        action, current = VOTE_CREATED, vote_type
        if post.user_id != voter.id:
            label = _flag_label(vote_type)
            notify(
                db,
                user_id=post.user_id,
                type=NOTIFICATION_VOTE,
                title=f"New {label.title()}",
                message=f"{voter.name} gave your post about {post.subject_name} a {label}",
                related_post_id=post.id,
            )

    try:
        refresh_counts(db, post)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Your vote changed in another request; please retry.") from exc
    logger.info("Vote %s on post %s by %s (%s)", action, post_id, voter.id, vote_type)
    return VoteOutcome(
        action=action,
        vote_type=current,
        green_flags=post.green_flags,
        red_flags=post.red_flags,
    )


def get_my_vote(db: Session, user_id: str, post_id: str) -> str | None:
    return (
        db.query(Vote.vote_type)
        .filter(Vote.post_id == post_id, Vote.user_id == user_id)
        .scalar()
    )
