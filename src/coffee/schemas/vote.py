"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    """Schema for casting, switching or withdrawing a vote."""

    post_id: str
    vote_type: Literal["green", "red"] = Field(..., description="green or red flag")


class VoteResponse(BaseModel):
    action: Literal["created", "changed", "removed"]
    vote_type: Literal["green", "red"] | None
    green_flags: int
    red_flags: int


class MyVoteResponse(BaseModel):
    post_id: str
    vote_type: Literal["green", "red"] | None
