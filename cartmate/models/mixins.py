"""Mixins for SQLAlchemy models."""

import uuid

from sqlalchemy import Column, DateTime, Uuid, func


class UUIDPrimaryKeyMixin:
    """Mixin to add a client-safe UUID primary key."""

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
