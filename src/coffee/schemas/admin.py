"""Admin dashboard Pydantic schemas."""

from pydantic import BaseModel, Field


class ApprovalRequest(BaseModel):
    approve: bool = Field(True, description="False returns the member to the pending queue")


class AdminToggleRequest(BaseModel):
    is_admin: bool


class AdminStats(BaseModel):
    total_users: int
    pending_users: int
    approved_users: int
    rejected_users: int
    admins: int
    awaiting_agreement: int
    total_posts: int


class StorageSetupResponse(BaseModel):
    created: list[str]
    existing: list[str]
