# src/coffee/api/v1/endpoints/comments.py
"""Comment endpoints for the Coffee API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from coffee.api.v1.dependencies import Guard, MemberDep, SessionDep
from coffee.models import User
from coffee.schemas.comment import CommentCreate, CommentResponse
from coffee.services import comments as comment_service
from coffee.services.access import Capability

router = APIRouter(prefix="/comments", tags=["comments"])

CommenterDep = Annotated[User, Depends(Guard(Capability.COMMENT))]


@router.get("", response_model=list[CommentResponse])
async def list_comments(
    user: MemberDep,
    db: SessionDep,
    post_id: str = Query(..., description="Post whose comments to list"),
) -> list[CommentResponse]:
    """Comments on a post, oldest first."""
    comments = comment_service.list_comments(db, post_id)
    return [CommentResponse.model_validate(comment) for comment in comments]


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(payload: CommentCreate, user: CommenterDep, db: SessionDep) -> CommentResponse:
    comment = comment_service.add_comment(db, user, payload.post_id, payload.content)
    return CommentResponse.model_validate(comment)
