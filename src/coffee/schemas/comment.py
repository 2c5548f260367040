"""Comment Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from coffee.schemas.user import AuthorSummary


class CommentCreate(BaseModel):
    post_id: str
    # Length is checked after trimming by the comment service.
    content: str = Field(..., max_length=2000)


class CommentResponse(BaseModel):
    id: str
    post_id: str
    user_id: str
    content: str
    created_at: datetime
    author: AuthorSummary | None = None

    model_config = ConfigDict(from_attributes=True)
