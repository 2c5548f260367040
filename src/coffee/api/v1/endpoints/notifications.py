# src/coffee/api/v1/endpoints/notifications.py
"""Notification endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from coffee.api.v1.dependencies import Guard, SessionDep
from coffee.models import User
from coffee.schemas.notification import MarkedRead, NotificationList, NotificationResponse
from coffee.services import notifications as notification_service
from coffee.services.access import Capability

router = APIRouter(prefix="/notifications", tags=["notifications"])

ReaderDep = Annotated[User, Depends(Guard(Capability.READ_NOTIFICATIONS))]


def notification_list(db: Session, user: User) -> NotificationList:
    return NotificationList(
        notifications=[
            NotificationResponse.model_validate(n)
            for n in notification_service.list_notifications(db, user.id)
        ],
        unread_count=notification_service.unread_count(db, user.id),
    )


@router.get("", response_model=NotificationList)
async def list_notifications(user: ReaderDep, db: SessionDep) -> NotificationList:
    """The caller's notifications, newest first, with the unread count."""
    return notification_list(db, user)


@router.get("/unread-count")
async def get_unread_count(user: ReaderDep, db: SessionDep) -> dict[str, int]:
    return {"unread_count": notification_service.unread_count(db, user.id)}


@router.post("/read-all", response_model=MarkedRead)
async def mark_all_read(user: ReaderDep, db: SessionDep) -> MarkedRead:
    """Clear the caller's unread notifications."""
    return MarkedRead(updated=notification_service.mark_all_read(db, user.id))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: str, user: ReaderDep, db: SessionDep) -> NotificationResponse:
    notification = notification_service.mark_read(db, user.id, notification_id)
    return NotificationResponse.model_validate(notification)
