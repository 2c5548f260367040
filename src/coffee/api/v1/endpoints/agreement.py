# src/coffee/api/v1/endpoints/agreement.py
"""Member agreement (onboarding) endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from coffee.api.v1.dependencies import Guard, SessionDep, StoreDep
from coffee.api.v1.views import agreement_view
from coffee.models import User
from coffee.schemas.user import AgreementUploadRequest, AgreementView, SignedUploadResponse
from coffee.services import users as user_service
from coffee.services.access import LANDING_PAGES, Capability, resolve_state
from coffee.services.storage import VERIFICATION_BUCKET, object_key, safe_filename

router = APIRouter(prefix="/agreement", tags=["agreement"])

AgreementUserDep = Annotated[User, Depends(Guard(Capability.COMPLETE_AGREEMENT))]


def _completed(user: User) -> dict[str, object]:
    return {"success": True, "redirect_to": LANDING_PAGES[resolve_state(user)]}


@router.get("", response_model=AgreementView)
async def get_agreement(user: AgreementUserDep) -> AgreementView:
    return agreement_view(user)


@router.post("")
async def submit_agreement(
    user: AgreementUserDep,
    db: SessionDep,
    store: StoreDep,
    full_name: Annotated[str, Form()] = "",
    agreed_to_terms: Annotated[bool, Form()] = False,
    display_name: Annotated[str | None, Form()] = None,
    photo: Annotated[UploadFile | None, File()] = None,
) -> dict[str, object]:
    """Upload the verification photo and record the agreement.

    On success the member waits for an admin and is pointed at the pending
    page.
    """
    uploaded = None
    if photo is not None:
        uploaded = user_service.UploadedFile(
            filename=photo.filename,
            content_type=photo.content_type,
            data=await photo.read(),
        )
    user = user_service.submit_agreement(
        db,
        store,
        user,
        full_name=full_name,
        display_name=display_name,
        agreed_to_terms=agreed_to_terms,
        photo=uploaded,
    )
    return _completed(user)


@router.post("/signed-upload", response_model=SignedUploadResponse)
async def create_signed_upload(
    user: AgreementUserDep,
    store: StoreDep,
    filename: str = Query("verification", max_length=200),
) -> SignedUploadResponse:
    """Issue a direct-upload URL for a large verification photo."""
    stem = safe_filename(filename, default="verification").rsplit(".", 1)[0]
    key = object_key(user.id, f"{stem}.jpg")
    return SignedUploadResponse(**store.create_signed_upload(VERIFICATION_BUCKET, key))


@router.post("/complete")
async def complete_with_upload(
    payload: AgreementUploadRequest,
    user: AgreementUserDep,
    db: SessionDep,
    store: StoreDep,
) -> dict[str, object]:
    """Record the agreement for a photo sent through ``/signed-upload``."""
    user = user_service.submit_agreement_from_upload(
        db,
        store,
        user,
        full_name=payload.full_name,
        display_name=payload.display_name,
        agreed_to_terms=payload.agreed_to_terms,
        photo_path=payload.photo_path,
    )
    return _completed(user)
