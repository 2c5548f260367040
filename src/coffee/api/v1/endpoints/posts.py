# src/coffee/api/v1/endpoints/posts.py
"""Post-related endpoints for the Coffee API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from coffee.api.v1.dependencies import Guard, MemberDep, SessionDep, StoreDep
from coffee.api.v1.views import feed_response, post_detail_response, post_response
from coffee.models import User
from coffee.schemas.post import (
    FeedResponse,
    PhotoUploadResponse,
    PostCreate,
    PostDetailResponse,
    PostResponse,
)
from coffee.services import posts as post_service
from coffee.services.access import Capability
from coffee.services.users import UploadedFile

router = APIRouter(prefix="/posts", tags=["posts"])

AuthorDep = Annotated[User, Depends(Guard(Capability.CREATE_POST))]
VoterDep = Annotated[User, Depends(Guard(Capability.VOTE))]


@router.get("", response_model=FeedResponse)
async def get_feed(
    user: MemberDep,
    db: SessionDep,
    page: int = Query(1, ge=1, description="1-based page number"),
) -> FeedResponse:
    """Return one page of the feed, newest first."""
    return feed_response(db, user, page)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(payload: PostCreate, user: AuthorDep, db: SessionDep) -> PostResponse:
    """Create a post and notify members whose alerts it matches."""
    post = post_service.create_post(db, user, payload)
    return post_response(post)


@router.post("/photos", response_model=PhotoUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_photo(
    user: AuthorDep,
    store: StoreDep,
    photo: Annotated[UploadFile, File()],
) -> PhotoUploadResponse:
    """Store one post photo and return the URL to reference in ``photos``."""
    stored = post_service.upload_post_photo(
        store,
        user,
        UploadedFile(
            filename=photo.filename,
            content_type=photo.content_type,
            data=await photo.read(),
        ),
    )
    return PhotoUploadResponse(url=stored.url, path=stored.key)


@router.get("/swipe", response_model=list[PostResponse])
async def get_swipe_queue(
    user: VoterDep,
    db: SessionDep,
    limit: int = Query(50, ge=1, le=100),
) -> list[PostResponse]:
    """Posts by other members the caller has not voted on yet."""
    return [post_response(post) for post in post_service.swipe_queue(db, user.id, limit=limit)]


@router.get("/{post_id}", response_model=PostDetailResponse)
async def get_post(post_id: str, user: MemberDep, db: SessionDep) -> PostDetailResponse:
    return post_detail_response(db, user, post_id)


@router.delete("/{post_id}")
async def delete_post(post_id: str, user: MemberDep, db: SessionDep) -> dict[str, bool]:
    """Delete one of the caller's own posts with its votes, comments and notifications."""
    post_service.delete_own_post(db, user, post_id)
    return {"success": True}
