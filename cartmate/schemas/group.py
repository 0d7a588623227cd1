"""Item group schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class GroupCreate(BaseModel):
    """Create a new item group."""

    name: str = Field(..., min_length=1, max_length=255)
    icon: str | None = Field(None, max_length=50)
    color: str | None = Field(None, max_length=20)
    sort_order: int = 0


class GroupUpdate(BaseModel):
    """Replace a group's fields."""

    name: str = Field(..., min_length=1, max_length=255)
    icon: str | None = Field(None, max_length=50)
    color: str | None = Field(None, max_length=20)
    sort_order: int = 0


class GroupResponse(BaseModel):
    """Item group response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    list_id: uuid.UUID
    name: str
    icon: str | None
    color: str | None
    sort_order: int
    item_count: int = 0
    created_at: datetime
    updated_at: datetime
