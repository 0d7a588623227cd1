"""Authentication schemas."""

import uuid

from pydantic import BaseModel, ConfigDict, Field


class OAuthLogin(BaseModel):
    """Provider access token obtained by the client-side OAuth flow."""

    access_token: str = Field(..., min_length=1, max_length=4096)


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    access_token: str
    token_type: str = "bearer"  # noqa: S105
    user: "UserResponse"


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    name: str
    profile_picture_url: str | None = None
