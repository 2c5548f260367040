# src/coffee/api/v1/endpoints/admin.py
"""Admin dashboard endpoints.

These routes only require a signed-in caller with a profile. Admin rights are
checked by ``AdminService`` itself, which re-reads the caller's row on every
action and answers ``{"success": false, "error": ...}`` with status 403 for
non-admins.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import JSONResponse

from coffee.api.v1.dependencies import AdminServiceDep, ProfileDep
from coffee.api.v1.views import admin_user_view, post_response
from coffee.core.errors import PermissionDeniedError
from coffee.schemas.admin import AdminStats, AdminToggleRequest, ApprovalRequest
from coffee.schemas.common import ActionResult
from coffee.schemas.post import PostResponse
from coffee.schemas.user import AdminUserView
from coffee.services.admin import USER_FILTERS

router = APIRouter(prefix="/admin", tags=["admin"])

T = TypeVar("T")


def _as_admin(action: Callable[[], T]) -> T | JSONResponse:
    try:
        return action()
    except PermissionDeniedError as exc:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"success": False, "error": exc.message},
        )


def _result(action: Callable[[], object]) -> ActionResult | JSONResponse:
    outcome = _as_admin(action)
    if isinstance(outcome, JSONResponse):
        return outcome
    return ActionResult(**outcome.as_dict())


@router.get("/users", response_model=list[AdminUserView])
async def list_users(
    caller: ProfileDep,
    service: AdminServiceDep,
    status_filter: str = Query("all", alias="status", description="all, pending, approved or rejected"),
):
    """Every member, newest first, including verification photos."""
    if status_filter not in USER_FILTERS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown status filter: {status_filter}",
        )
    outcome = _as_admin(lambda: service.list_users(caller.id, status_filter))
    if isinstance(outcome, JSONResponse):
        return outcome
    return [admin_user_view(user) for user in outcome]


@router.get("/posts", response_model=list[PostResponse])
async def list_posts(caller: ProfileDep, service: AdminServiceDep):
    outcome = _as_admin(lambda: service.list_posts(caller.id))
    if isinstance(outcome, JSONResponse):
        return outcome
    return [post_response(post) for post in outcome]


@router.get("/stats", response_model=AdminStats)
async def get_stats(caller: ProfileDep, service: AdminServiceDep):
    outcome = _as_admin(lambda: service.stats(caller.id))
    if isinstance(outcome, JSONResponse):
        return outcome
    return AdminStats(**outcome)


@router.post("/users/{user_id}/approve", response_model=ActionResult)
async def approve_user(
    user_id: str,
    caller: ProfileDep,
    service: AdminServiceDep,
    payload: ApprovalRequest | None = None,
):
    """Approve a member, or with ``approve=false`` send them back to pending."""
    approve = payload.approve if payload is not None else True
    return _result(lambda: service.approve(caller.id, user_id, approve))


@router.post("/users/{user_id}/reject", response_model=ActionResult)
async def reject_user(user_id: str, caller: ProfileDep, service: AdminServiceDep):
    return _result(lambda: service.reject(caller.id, user_id))


@router.post("/users/{user_id}/admin", response_model=ActionResult)
async def set_admin(
    user_id: str,
    payload: AdminToggleRequest,
    caller: ProfileDep,
    service: AdminServiceDep,
):
    return _result(lambda: service.set_admin(caller.id, user_id, payload.is_admin))


@router.delete("/users/{user_id}", response_model=ActionResult)
async def delete_user(user_id: str, caller: ProfileDep, service: AdminServiceDep):
    """Delete a member together with their posts, votes, comments, alerts and notifications."""
    return _result(lambda: service.delete_user(caller.id, user_id))


@router.delete("/posts/{post_id}", response_model=ActionResult)
async def delete_post(post_id: str, caller: ProfileDep, service: AdminServiceDep):
    return _result(lambda: service.delete_post(caller.id, post_id))
