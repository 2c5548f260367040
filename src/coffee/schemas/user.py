"""User and session Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    """Email and password for a new identity account."""

    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=256)


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=256)


class TokenResponse(BaseModel):
    """Response returned after successful sign-up or sign-in."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type (always 'bearer')")
    user_id: str
    email: str


class SessionResponse(BaseModel):
    """Who the caller is and where the access policy wants them."""

    authenticated: bool
    user_id: str | None = None
    email: str | None = None
    state: str | None = None
    is_admin: bool = False
    landing_page: str


class AuthorSummary(BaseModel):
    """The few author fields shown next to posts and comments."""

    id: str
    name: str
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PublicProfile(BaseModel):
    """Profile fields any approved member may see."""

    id: str
    name: str
    display_name: str | None
    full_name: str | None
    avatar_url: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(PublicProfile):
    """The caller's own profile."""

    email: str
    phone_number: str | None
    agreed_to_terms: bool
    is_approved: bool
    is_rejected: bool
    is_admin: bool


class AdminUserView(ProfileResponse):
    """Profile as seen from the admin dashboard."""

    verification_photo_url: str | None
    state: str


class AgreementView(BaseModel):
    """What the agreement page needs to render."""

    state: str
    email: str
    full_name: str | None
    display_name: str | None
    agreed_to_terms: bool
    has_verification_photo: bool
    missing: list[str]


class AgreementUploadRequest(BaseModel):
    """Completes the agreement using a photo uploaded through a signed upload."""

    full_name: str = Field(..., min_length=1, max_length=200)
    display_name: str | None = Field(None, max_length=100)
    agreed_to_terms: bool
    photo_path: str = Field(..., min_length=1, max_length=512)


class SignedUploadResponse(BaseModel):
    path: str
    url: str
    fields: dict[str, str]


class PendingView(BaseModel):
    """Status shown to members waiting on, or refused by, an admin."""

    state: str
    email: str
    is_rejected: bool
    message: str
