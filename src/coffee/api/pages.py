# src/coffee/api/pages.py
"""Page routes.

Each page answers with the JSON a browser client needs to render it. All of
them except the public pages depend on ``ProfileDep``, so the guard picks the
capability from the page path and redirects with ``303 See Other`` when the
caller's account state does not allow it.
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from coffee.api.v1.dependencies import AdminServiceDep, OptionalAccountDep, ProfileDep, SessionDep
from coffee.api.v1.endpoints.notifications import notification_list
from coffee.api.v1.endpoints.search import run_search
from coffee.api.v1.endpoints.users import MemberPage, member_page
from coffee.api.v1.views import (
    admin_user_view,
    agreement_view,
    feed_response,
    pending_view,
    post_detail_response,
    post_response,
)
from coffee.schemas.admin import AdminStats
from coffee.schemas.alert import AlertResponse
from coffee.schemas.notification import NotificationList
from coffee.schemas.post import MAX_PHOTOS, FeedResponse, PostDetailResponse
from coffee.schemas.search import SearchResponse
from coffee.schemas.user import AgreementView, PendingView, ProfileResponse
from coffee.services import alerts as alert_service
from coffee.services import posts as post_service
from coffee.services.storage import MB

router = APIRouter(tags=["pages"])


@router.get("/login")
async def login_page(account: OptionalAccountDep) -> dict[str, object]:
    return {"page": "login", "signed_in": account is not None, "signup_url": "/signup"}


@router.get("/signup")
async def signup_page(account: OptionalAccountDep) -> dict[str, object]:
    return {"page": "signup", "signed_in": account is not None, "login_url": "/login"}


@router.get("/feed", response_model=FeedResponse)
async def feed_page(
    user: ProfileDep,
    db: SessionDep,
    page: int = Query(1, ge=1),
) -> FeedResponse:
    return feed_response(db, user, page)


@router.get("/post")
async def create_post_page(user: ProfileDep) -> dict[str, object]:
    return {
        "page": "create_post",
        "max_photos": MAX_PHOTOS,
        "max_photo_bytes": post_service.MAX_POST_PHOTO_BYTES,
        "max_photo_mb": post_service.MAX_POST_PHOTO_BYTES // MB,
    }


@router.get("/post/{post_id}", response_model=PostDetailResponse)
async def post_page(post_id: str, user: ProfileDep, db: SessionDep) -> PostDetailResponse:
    return post_detail_response(db, user, post_id)


@router.get("/swipe")
async def swipe_page(user: ProfileDep, db: SessionDep) -> dict[str, object]:
    posts = post_service.swipe_queue(db, user.id)
    return {"posts": [post_response(post) for post in posts]}


@router.get("/search", response_model=SearchResponse)
async def search_page(
    user: ProfileDep,
    db: SessionDep,
    q: str | None = Query(None, max_length=200),
    type: str = Query("all"),
    city: str | None = Query(None, max_length=100),
    state: str | None = Query(None, max_length=100),
    phone: str | None = Query(None, max_length=32),
) -> SearchResponse:
    return run_search(
        db,
        user,
        q=q,
        type=type,
        city=city,
        state=state,
        phone=phone,
        create_alert=False,
    )


@router.get("/alerts")
async def alerts_page(user: ProfileDep, db: SessionDep) -> dict[str, object]:
    alerts = alert_service.list_alerts(db, user.id)
    return {"alerts": [AlertResponse.model_validate(alert) for alert in alerts]}


@router.get("/notifications", response_model=NotificationList)
async def notifications_page(user: ProfileDep, db: SessionDep) -> NotificationList:
    return notification_list(db, user)


@router.get("/admin")
async def admin_page(user: ProfileDep, service: AdminServiceDep) -> dict[str, object]:
    return {
        "users": [admin_user_view(member) for member in service.list_users(user.id)],
        "stats": AdminStats(**service.stats(user.id)),
    }


@router.get("/profile", response_model=ProfileResponse)
async def profile_page(user: ProfileDep):
    return user


@router.get("/user/{user_id}", response_model=MemberPage)
async def member_profile_page(user_id: str, user: ProfileDep, db: SessionDep) -> MemberPage:
    return member_page(db, user_id)


@router.get("/agreement", response_model=AgreementView)
async def agreement_page(user: ProfileDep) -> AgreementView:
    return agreement_view(user)


@router.get("/pending", response_model=PendingView)
async def pending_page(user: ProfileDep) -> PendingView:
    return pending_view(user)
