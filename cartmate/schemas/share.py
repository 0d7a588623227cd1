"""List share schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class ListShareCreate(BaseModel):
    """Share a list with another user."""

    user_email: EmailStr = Field(..., max_length=255)
    can_edit: bool = True


class ListShareUpdate(BaseModel):
    """Change a share's permission."""

    can_edit: bool


class ListShareResponse(BaseModel):
    """List share response."""

    id: uuid.UUID
    list_id: uuid.UUID
    list_name: str
    user_id: uuid.UUID
    user_email: str
    user_name: str
    can_edit: bool
    shared_at: datetime
