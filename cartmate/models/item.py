"""Grocery item and item group models."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship

from cartmate.database import Base
from cartmate.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class ItemGroup(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Named group for organizing items within a list."""

    __tablename__ = "item_groups"

    list_id = Column(
        Uuid, ForeignKey("grocery_lists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    icon = Column(String(50), nullable=True)  # emoji
    color = Column(String(20), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    # Relationships
    list = relationship("GroceryList", back_populates="groups")
    items = relationship("GroceryItem", back_populates="group")


class GroceryItem(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Item on a grocery list."""

    __tablename__ = "grocery_items"

    list_id = Column(
        Uuid, ForeignKey("grocery_lists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    group_id = Column(
        Uuid, ForeignKey("item_groups.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name = Column(String(500), nullable=False)
    description = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit = Column(String(50), nullable=True)  # "kg", "pcs", etc.
    is_bought = Column(Boolean, nullable=False, default=False, index=True)
    bought_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    list = relationship("GroceryList", back_populates="items")
    group = relationship("ItemGroup", back_populates="items")

    def set_bought(self, is_bought: bool, when: datetime) -> None:
        """Set the bought flag and its timestamp together."""
        self.is_bought = is_bought
        self.bought_at = when if is_bought else None
