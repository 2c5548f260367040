# src/coffee/api/v1/endpoints/votes.py
"""Voting endpoints for the Coffee API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from coffee.api.v1.dependencies import Guard, MemberDep, SessionDep
from coffee.models import User
from coffee.schemas.vote import MyVoteResponse, VoteCreate, VoteResponse
from coffee.services import posts as post_service
from coffee.services import votes as vote_service
from coffee.services.access import Capability

router = APIRouter(prefix="/votes", tags=["votes"])

VoterDep = Annotated[User, Depends(Guard(Capability.VOTE))]


@router.post("", response_model=VoteResponse)
async def cast_vote(payload: VoteCreate, user: VoterDep, db: SessionDep) -> VoteResponse:
    """Cast, switch or withdraw a green or red flag.

    Sending the same type as the caller's current vote withdraws it.
    """
    outcome = vote_service.cast_vote(db, user, payload.post_id, payload.vote_type)
    return VoteResponse(
        action=outcome.action,
        vote_type=outcome.vote_type,
        green_flags=outcome.green_flags,
        red_flags=outcome.red_flags,
    )


@router.get("/{post_id}", response_model=MyVoteResponse)
async def get_my_vote(post_id: str, user: MemberDep, db: SessionDep) -> MyVoteResponse:
    post_service.get_post_or_404(db, post_id)
    return MyVoteResponse(post_id=post_id, vote_type=vote_service.get_my_vote(db, user.id, post_id))
