# src/coffee/api/v1/endpoints/profile.py
"""Self-service profile endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from coffee.api.v1.dependencies import Guard, OptionalStoreDep, SessionDep
from coffee.models import User
from coffee.schemas.user import ProfileResponse
from coffee.services import users as user_service
from coffee.services.access import Capability

router = APIRouter(prefix="/profile", tags=["profile"])

ProfileOwnerDep = Annotated[User, Depends(Guard(Capability.EDIT_PROFILE))]


@router.get("", response_model=ProfileResponse)
async def get_profile(user: ProfileOwnerDep) -> User:
    return user


@router.patch("", response_model=ProfileResponse)
async def update_profile(
    request: Request,
    user: ProfileOwnerDep,
    db: SessionDep,
    store: OptionalStoreDep,
    display_name: Annotated[str | None, Form(max_length=100)] = None,
    full_name: Annotated[str | None, Form(max_length=200)] = None,
    phone_number: Annotated[str | None, Form(max_length=32)] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
) -> User:
    """Update profile fields; omitted fields are left alone, empty ones cleared.

    Raises:
        ConfigurationError: If an avatar is sent but storage is not configured.
    """
    # Empty form fields arrive as None; a submitted empty field means "clear it".
    submitted = await request.form()

    def field(name: str, value: str | None) -> str | None:
        if value is None and name in submitted:
            return ""
        return value

    uploaded = None
    if avatar is not None:
        uploaded = user_service.UploadedFile(
            filename=avatar.filename,
            content_type=avatar.content_type,
            data=await avatar.read(),
        )
    return user_service.update_profile(
        db,
        store,
        user,
        display_name=field("display_name", display_name),
        full_name=field("full_name", full_name),
        phone_number=field("phone_number", phone_number),
        avatar=uploaded,
    )
