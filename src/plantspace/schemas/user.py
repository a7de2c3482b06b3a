"""User and authentication Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Registration payload; rule checks happen in the endpoint so all failures are reported together."""

    username: str | None = None
    email: str | None = None
    password: str | None = None
    display_name: str | None = None


class LoginRequest(BaseModel):
    identifier: str | None = Field(None, description="Email address or username")
    password: str | None = None


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    display_name: str | None = Field(None, max_length=100)
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = None
    cover_url: str | None = None


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str


class UserSummary(BaseModel):
    """Public author fields embedded in posts, comments and messages."""

    id: str
    username: str
    display_name: str
    avatar_url: str | None = None
    is_verified: bool = False

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserSummary):
    """Full account view returned to the account owner."""

    email: str
    bio: str | None = None
    cover_url: str | None = None
    verification_status: str
    has_completed_onboarding: bool
    is_admin: bool
    created_at: datetime
    updated_at: datetime | None = None


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserResponse
