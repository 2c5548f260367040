# src/coffee/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from coffee.schemas.comment import CommentResponse
from coffee.schemas.user import AuthorSummary

MAX_PHOTOS = 6


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    subject_name: str = Field(..., min_length=1, max_length=100)
    subject_age: int = Field(..., ge=18, le=100, description="Age of the person (18-100)")
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    phone_number: str | None = Field(None, max_length=32)
    caption: str = Field(..., min_length=1, max_length=1000)
    photos: list[str] = Field(default_factory=list, max_length=MAX_PHOTOS)

    @field_validator("subject_name", "city", "state", "caption")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("This field is required.")
        return stripped

    @field_validator("phone_number")
    @classmethod
    def _blank_phone_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    user_id: str
    subject_name: str
    subject_age: int
    city: str | None
    state: str | None
    phone_number: str | None
    caption: str
    photos: list[str]
    green_flags: int
    red_flags: int
    created_at: datetime
    author: AuthorSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class FeedResponse(BaseModel):
    posts: list[PostResponse]
    page: int
    total_pages: int
    total_posts: int
    unread_notifications: int


class PostDetailResponse(BaseModel):
    post: PostResponse
    comments: list[CommentResponse]
    my_vote: str | None
    is_owner: bool


class PhotoUploadResponse(BaseModel):
    url: str
    path: str
