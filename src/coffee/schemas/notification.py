"""Notification Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str
    related_post_id: str | None
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationList(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int


class MarkedRead(BaseModel):
    updated: int
