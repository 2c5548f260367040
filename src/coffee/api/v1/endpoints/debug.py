"""Diagnostic endpoints, mounted only when ``DEBUG`` is enabled."""

from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy import func, text

from coffee.api.v1.dependencies import OptionalAccountDep, ProfileDep, SessionDep
from coffee.core import security
from coffee.models import Alert, Comment, Notification, Post, User, Vote
from coffee.services.access import allowed_capabilities, needs_admin_repair, resolve_state

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/auth")
async def debug_auth(account: OptionalAccountDep) -> dict[str, object]:
    """Show whether the request carries a valid session."""
    if account is None:
        return {"authenticated": False}
    return {
        "authenticated": True,
        "account_id": account.id,
        "email": account.email,
        "token_version": account.token_version,
    }


@router.get("/permissions")
async def debug_permissions(user: ProfileDep) -> dict[str, object]:
    """Show how the access policy sees the caller."""
    state = resolve_state(user)
    return {
        "user_id": user.id,
        "state": state.value,
        "is_admin": user.is_admin,
        "is_approved": user.is_approved,
        "is_rejected": user.is_rejected,
        "agreed_to_terms": user.agreed_to_terms,
        "needs_admin_repair": needs_admin_repair(user),
        "capabilities": sorted(c.value for c in allowed_capabilities(state, is_admin=user.is_admin)),
    }


@router.get("/db")
async def debug_db(db: SessionDep) -> dict[str, object]:
    """Probe the database directly and report row counts."""
    db.execute(text("SELECT 1"))
    return {
        "ok": True,
        "counts": {
            model.__tablename__: db.query(func.count()).select_from(model).scalar() or 0
            for model in (User, Post, Vote, Comment, Notification, Alert)
        },
    }


@router.get("/token")
async def debug_token(token: str) -> dict[str, object]:
    """Decode a token and show its claims, or report that it is invalid."""
    claims = security.decode_access_token(token)
    if claims is None:
        return {"valid": False}
    return {"valid": True, "claims": claims}
