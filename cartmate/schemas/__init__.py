"""Pydantic schemas for API requests and responses."""

from cartmate.schemas.auth import AuthResponse, OAuthLogin, UserResponse
from cartmate.schemas.group import GroupCreate, GroupResponse, GroupUpdate
from cartmate.schemas.item import (
    ItemBoughtStatus,
    ItemBoughtUpdate,
    ItemCreate,
    ItemResponse,
    ItemUpdate,
)
from cartmate.schemas.list import (
    AcceptShareResponse,
    ActiveUserResponse,
    ListCreate,
    ListResponse,
    ListSettingsUpdate,
    ListUpdate,
    MagicLinkCreate,
    MagicLinkResponse,
)
from cartmate.schemas.share import ListShareCreate, ListShareResponse, ListShareUpdate
from cartmate.schemas.settings import (
    ApiKeyCreate,
    ApiKeyCreated,
    ApiKeyResponse,
    DefaultList,
    ExternalAddItem,
    ExternalAddItemResponse,
)

__all__ = [
    "OAuthLogin",
    "AuthResponse",
    "UserResponse",
    "ListCreate",
    "ListUpdate",
    "ListSettingsUpdate",
    "ListResponse",
    "MagicLinkCreate",
    "MagicLinkResponse",
    "AcceptShareResponse",
    "ActiveUserResponse",
    "ListShareCreate",
    "ListShareUpdate",
    "ListShareResponse",
    "ItemCreate",
    "ItemUpdate",
    "ItemBoughtUpdate",
    "ItemBoughtStatus",
    "ItemResponse",
    "GroupCreate",
    "GroupUpdate",
    "GroupResponse",
    "DefaultList",
    "ApiKeyCreate",
    "ApiKeyCreated",
    "ApiKeyResponse",
    "ExternalAddItem",
    "ExternalAddItemResponse",
]
