"""User settings and API key schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cartmate.schemas.item import ItemResponse


class DefaultList(BaseModel):
    """The list external integrations add items to."""

    list_id: uuid.UUID | None = None


class ApiKeyCreate(BaseModel):
    """Create an API key."""

    name: str = Field(..., min_length=1, max_length=100)


class ApiKeyResponse(BaseModel):
    """API key metadata (never includes the key itself)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    created_at: datetime
    last_used_at: datetime | None


class ApiKeyCreated(BaseModel):
    """Newly created API key; the raw key is only returned once."""

    id: uuid.UUID
    name: str
    key: str
    created_at: datetime


class ExternalAddItem(BaseModel):
    """Add an item from an external integration."""

    model_config = ConfigDict(str_strip_whitespace=True)

    item_name: str = Field(..., min_length=1, max_length=500)
    list_id: uuid.UUID | None = None


class ExternalAddItemResponse(BaseModel):
    """External add-item result."""

    success: bool
    item: ItemResponse
