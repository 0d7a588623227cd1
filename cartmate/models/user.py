"""User model."""

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint, Uuid

from cartmate.database import Base
from cartmate.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """User provisioned from an external OAuth identity provider."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("external_provider", "external_user_id", name="uq_user_external_identity"),
    )

    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, default="")
    profile_picture_url = Column(String(1000), nullable=True)
    external_provider = Column(String(50), nullable=False)  # "google", "facebook"
    external_user_id = Column(String(255), nullable=False)
    default_list_id = Column(
        Uuid, ForeignKey("grocery_lists.id", ondelete="SET NULL", use_alter=True), nullable=True
    )
