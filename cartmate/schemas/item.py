"""Item schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ItemCreate(BaseModel):
    """Create a new item."""

    name: str = Field(..., min_length=1, max_length=500)
    description: str | None = Field(None, max_length=2000)
    quantity: int = Field(1, ge=1)
    unit: str | None = Field(None, max_length=50)
    group_id: uuid.UUID | None = None


class ItemUpdate(BaseModel):
    """Replace an item's editable fields."""

    name: str = Field(..., min_length=1, max_length=500)
    description: str | None = Field(None, max_length=2000)
    quantity: int = Field(1, ge=1)
    unit: str | None = Field(None, max_length=50)
    group_id: uuid.UUID | None = None


class ItemBoughtUpdate(BaseModel):
    """Mark an item bought or not bought."""

    is_bought: bool


class ItemResponse(BaseModel):
    """Item response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    list_id: uuid.UUID
    group_id: uuid.UUID | None
    group_name: str | None = None
    name: str
    description: str | None
    quantity: int
    unit: str | None
    is_bought: bool
    bought_at: datetime | None
    created_at: datetime
    updated_at: datetime


class ItemBoughtStatus(BaseModel):
    """Payload broadcast when an item's bought flag changes."""

    id: uuid.UUID
    is_bought: bool
    bought_at: datetime | None
    updated_at: datetime
