"""Search Pydantic schemas."""

from pydantic import BaseModel

from coffee.schemas.alert import AlertResponse
from coffee.schemas.post import PostResponse


class SearchResponse(BaseModel):
    posts: list[PostResponse]
    count: int
    alert: AlertResponse | None = None
