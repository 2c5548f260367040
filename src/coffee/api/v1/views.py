"""Response builders shared by the JSON API and the page views."""

from __future__ import annotations

from sqlalchemy.orm import Session

from coffee.models import AuthAccount, Post, User
from coffee.schemas.comment import CommentResponse
from coffee.schemas.post import FeedResponse, PostDetailResponse, PostResponse
from coffee.schemas.user import (
    AdminUserView,
    AgreementView,
    PendingView,
    ProfileResponse,
    SessionResponse,
)
from coffee.services import notifications as notification_service
from coffee.services import posts as post_service
from coffee.services.access import LANDING_PAGES, LOGIN_PAGE, AccountState, resolve_state

REJECTED_MESSAGE = (
    "Your account application was not approved. "
    "Contact an administrator if you believe this is a mistake."
)
PENDING_MESSAGE = "Thanks for verifying! An admin will review your account shortly."


def post_response(post: Post) -> PostResponse:
    return PostResponse.model_validate(post)


def feed_response(db: Session, user: User, page: int) -> FeedResponse:
    feed = post_service.get_feed(db, page)
    return FeedResponse(
        posts=[post_response(post) for post in feed.posts],
        page=feed.page,
        total_pages=feed.total_pages,
        total_posts=feed.total_posts,
        unread_notifications=notification_service.unread_count(db, user.id),
    )


def post_detail_response(db: Session, user: User, post_id: str) -> PostDetailResponse:
    detail = post_service.get_post_detail(db, post_id, user.id)
    return PostDetailResponse(
        post=post_response(detail.post),
        comments=[CommentResponse.model_validate(comment) for comment in detail.comments],
        my_vote=detail.my_vote,
        is_owner=detail.post.user_id == user.id,
    )


def missing_agreement_fields(user: User) -> list[str]:
    missing = []
    if not user.full_name:
        missing.append("full_name")
    if not user.verification_photo_url:
        missing.append("verification_photo")
    if not user.agreed_to_terms:
        missing.append("agreed_to_terms")
    return missing


def agreement_view(user: User) -> AgreementView:
    return AgreementView(
        state=resolve_state(user).value,
        email=user.email,
        full_name=user.full_name,
        display_name=user.display_name,
        agreed_to_terms=user.agreed_to_terms,
        has_verification_photo=bool(user.verification_photo_url),
        missing=missing_agreement_fields(user),
    )


def pending_view(user: User) -> PendingView:
    state = resolve_state(user)
    rejected = state is AccountState.REJECTED
    return PendingView(
        state=state.value,
        email=user.email,
        is_rejected=rejected,
        message=REJECTED_MESSAGE if rejected else PENDING_MESSAGE,
    )


def admin_user_view(user: User) -> AdminUserView:
    profile = ProfileResponse.model_validate(user).model_dump()
    return AdminUserView(
        **profile,
        verification_photo_url=user.verification_photo_url,
        state=resolve_state(user).value,
    )


def session_response(account: AuthAccount | None, user: User | None) -> SessionResponse:
    if account is None:
        return SessionResponse(authenticated=False, landing_page=LOGIN_PAGE)
    state = resolve_state(user)
    return SessionResponse(
        authenticated=True,
        user_id=account.id,
        email=account.email,
        state=state.value,
        is_admin=bool(user and user.is_admin),
        landing_page=LANDING_PAGES[state],
    )
