# src/coffee/api/v1/endpoints/users.py
"""Public member pages."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy.orm import Session

from coffee.api.v1.dependencies import MemberDep, SessionDep
from coffee.api.v1.views import post_response
from coffee.schemas.post import PostResponse
from coffee.schemas.user import PublicProfile
from coffee.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


class MemberPage(BaseModel):
    profile: PublicProfile
    posts: list[PostResponse]


def member_page(db: Session, user_id: str) -> MemberPage:
    member = user_service.get_member(db, user_id)
    return MemberPage(
        profile=PublicProfile.model_validate(member),
        posts=[post_response(post) for post in user_service.list_member_posts(db, user_id)],
    )


@router.get("/{user_id}", response_model=MemberPage)
async def get_member(user_id: str, user: MemberDep, db: SessionDep) -> MemberPage:
    """A member's public profile and their posts, newest first."""
    return member_page(db, user_id)
