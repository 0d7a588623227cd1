"""List schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ListCreate(BaseModel):
    """Create a new list."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)


class ListUpdate(BaseModel):
    """Update a list's details."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)


class ListSettingsUpdate(BaseModel):
    """Owner-only list settings."""

    auto_remove_bought_items_enabled: bool
    auto_remove_bought_items_delay_minutes: int = Field(60, ge=1, le=60 * 24 * 30)


class ListResponse(BaseModel):
    """List response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None
    owner_id: uuid.UUID
    owner_name: str = ""
    created_at: datetime
    updated_at: datetime
    item_count: int = 0
    bought_item_count: int = 0
    is_shared: bool = False
    can_edit: bool = False
    auto_remove_bought_items_enabled: bool
    auto_remove_bought_items_delay_minutes: int


class MagicLinkCreate(BaseModel):
    """Generate a single-use share link."""

    can_edit: bool = False


class MagicLinkResponse(BaseModel):
    """Magic link for sharing a list."""

    token: str
    share_url: str
    can_edit: bool


class AcceptShareResponse(BaseModel):
    """Result of redeeming a magic link."""

    list_id: uuid.UUID
    list_name: str
    owner_name: str


class ActiveUserResponse(BaseModel):
    """A user currently viewing a list."""

    user_id: uuid.UUID
    user_name: str
