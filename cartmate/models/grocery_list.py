"""Grocery list and list share models."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from cartmate.database import Base
from cartmate.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin

DEFAULT_AUTO_REMOVE_DELAY_MINUTES = 60


class GroceryList(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """A grocery list owned by exactly one user."""

    __tablename__ = "grocery_lists"

    name = Column(String(255), nullable=False)
    description = Column(String, nullable=True)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Magic link: redeemed once, then cleared
    share_token = Column(String(100), nullable=True, unique=True)
    share_token_can_edit = Column(Boolean, nullable=False, default=False)

    # Delete bought items automatically after a delay
    auto_remove_bought_items_enabled = Column(Boolean, nullable=False, default=False)
    auto_remove_bought_items_delay_minutes = Column(
        Integer, nullable=False, default=DEFAULT_AUTO_REMOVE_DELAY_MINUTES
    )

    # Relationships
    owner = relationship("User", foreign_keys=[owner_id], backref="owned_lists")
    items = relationship("GroceryItem", back_populates="list", cascade="all, delete-orphan")
    groups = relationship("ItemGroup", back_populates="list", cascade="all, delete-orphan")
    shares = relationship("ListShare", back_populates="list", cascade="all, delete-orphan")


class ListShare(Base, UUIDPrimaryKeyMixin):
    """Grants a non-owner read (and optionally edit) access to one list."""

    __tablename__ = "list_shares"
    __table_args__ = (UniqueConstraint("list_id", "user_id", name="uq_list_share_user"),)

    list_id = Column(
        Uuid, ForeignKey("grocery_lists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    can_edit = Column(Boolean, nullable=False, default=True)
    shared_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))

    # Relationships
    list = relationship("GroceryList", back_populates="shares")
    user = relationship("User", backref="shared_lists")
