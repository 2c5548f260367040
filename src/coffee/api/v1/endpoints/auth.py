# src/coffee/api/v1/endpoints/auth.py
"""Authentication endpoints for the Coffee API."""

from __future__ import annotations

from fastapi import APIRouter, Response, status
from sqlalchemy.exc import SQLAlchemyError

from coffee.api.v1.dependencies import (
    CurrentAccountDep,
    OptionalAccountDep,
    SessionDep,
    SleepDep,
)
from coffee.api.v1.views import session_response
from coffee.core.errors import CoffeeError
from coffee.core.settings import settings
from coffee.schemas.user import LoginRequest, SessionResponse, SignupRequest, TokenResponse
from coffee.services import identity
from coffee.services.identity import IssuedSession
from coffee.services.users import load_profile, repair_admin_profile

router = APIRouter(prefix="/auth", tags=["authentication"])


def _token_response(response: Response, issued: IssuedSession) -> TokenResponse:
    response.set_cookie(
        settings.session_cookie_name,
        issued.access_token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return TokenResponse(
        access_token=issued.access_token,
        token_type=issued.token_type,
        user_id=issued.account.id,
        email=issued.account.email,
    )


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(payload: SignupRequest, response: Response, db: SessionDep) -> TokenResponse:
    """Create an identity account and start a session.

    The member profile is not created here; it appears on the first
    authenticated request.
    """
    issued = identity.sign_up(db, payload.email, payload.password)
    return _token_response(response, issued)


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, response: Response, db: SessionDep) -> TokenResponse:
    issued = identity.sign_in(db, payload.email, payload.password)
    return _token_response(response, issued)


@router.post("/logout")
async def logout(account: CurrentAccountDep, response: Response, db: SessionDep) -> dict[str, bool]:
    """Revoke every token of the caller and clear the session cookie."""
    identity.sign_out(db, account)
    response.delete_cookie(settings.session_cookie_name)
    return {"success": True}


@router.get("/session", response_model=SessionResponse)
async def get_session(
    account: OptionalAccountDep,
    db: SessionDep,
    sleep: SleepDep,
) -> SessionResponse:
    """Report who the caller is and which page their account state leads to."""
    if account is None:
        return session_response(None, None)
    try:
        user = load_profile(db, account, sleep=sleep)
        repair_admin_profile(db, user)
    except (SQLAlchemyError, CoffeeError):
        db.rollback()
        return session_response(None, None)
    return session_response(account, user)
