"""SQLAlchemy models."""

from cartmate.models.api_key import ApiKey
from cartmate.models.grocery_list import GroceryList, ListShare
from cartmate.models.item import GroceryItem, ItemGroup
from cartmate.models.user import User

__all__ = [
    "User",
    "GroceryList",
    "ListShare",
    "GroceryItem",
    "ItemGroup",
    "ApiKey",
]
