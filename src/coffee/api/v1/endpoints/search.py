# src/coffee/api/v1/endpoints/search.py
"""Post search endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.orm import Session

from coffee.api.v1.dependencies import MemberDep, SessionDep
from coffee.api.v1.views import post_response
from coffee.models import User
from coffee.schemas.alert import AlertResponse
from coffee.schemas.search import SearchResponse
from coffee.services import alerts as alert_service
from coffee.services import posts as post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


def run_search(
    db: Session,
    user: User,
    *,
    q: str | None,
    type: str,
    city: str | None,
    state: str | None,
    phone: str | None,
    create_alert: bool,
) -> SearchResponse:
    """Search posts and optionally save the search as an alert.

    The alert is only stored when the search found something.
    """
    if type not in post_service.SEARCH_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown search type: {type}",
        )
    posts = post_service.search_posts(
        db,
        term=q,
        search_type=type,
        city=city,
        state=state,
        phone=phone,
    )
    alert = None
    if create_alert and posts and q:
        created = alert_service.create_alert_from_search(db, user.id, type, q)
        if created is not None:
            logger.info("Saved search by %s as %s alert", user.id, created.alert_type)
            alert = AlertResponse.model_validate(created)
    return SearchResponse(
        posts=[post_response(post) for post in posts],
        count=len(posts),
        alert=alert,
    )


@router.get("", response_model=SearchResponse)
async def search(
    user: MemberDep,
    db: SessionDep,
    q: str | None = Query(None, max_length=200, description="Search term"),
    type: str = Query("all", description="Field to search"),
    city: str | None = Query(None, max_length=100),
    state: str | None = Query(None, max_length=100),
    phone: str | None = Query(None, max_length=32),
    create_alert: bool = Query(False, description="Save the search as an alert"),
) -> SearchResponse:
    return run_search(
        db,
        user,
        q=q,
        type=type,
        city=city,
        state=state,
        phone=phone,
        create_alert=create_alert,
    )
