"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ActionResult(BaseModel):
    """Outcome of an admin action."""

    success: bool
    error: str | None = Field(None, description="Present only when success is false")


class AccessDenied(BaseModel):
    """Body returned by guarded API routes when the caller must go elsewhere."""

    detail: str
    redirect_to: str


class ErrorResponse(BaseModel):
    detail: str
    code: str
