"""Authentication service for JWT bearer tokens and OAuth user provisioning."""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cartmate.config import get_settings
from cartmate.models.user import User

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class Principal:
    """Authenticated identity resolved from a bearer token."""

    id: uuid.UUID
    email: str
    name: str


class AccountConflictError(Exception):
    """E-mail already registered through a different identity provider."""

    def __init__(self, existing_provider: str) -> None:
        super().__init__(
            f"Account exists with {existing_provider}. Please sign in with that provider."
        )
        self.existing_provider = existing_provider


class UserProvisioningError(Exception):
    """User could not be created or re-read after a concurrent insert."""


def mask_email(email: str) -> str:
    """Mask an e-mail address for logging: j***@example.com."""
    local, _, domain = email.partition("@")
    if not domain:
        return "***"
    return f"{local[:1]}***@{domain}"


def create_access_token(user_id: uuid.UUID, email: str, name: str = "") -> str:
    """Create a JWT access token."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_expiration_minutes)
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "name": name,
        "exp": expire,
    }
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload
    except JWTError:
        return None


def principal_from_token(token: str) -> Principal | None:
    """Resolve a principal from a bearer token, or None if it is invalid."""
    payload = decode_access_token(token)
    if not payload:
        return None
    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        return None
    return Principal(id=user_id, email=payload.get("email", ""), name=payload.get("name", ""))


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


def _find_or_stage_user(
    db: Session,
    provider: str,
    external_user_id: str,
    email: str,
    name: str,
    profile_picture_url: str | None,
) -> User:
    user = (
        db.query(User)
        .filter(User.external_provider == provider, User.external_user_id == external_user_id)
        .first()
    )
    if user:
        user.email = email
        user.name = name
        user.profile_picture_url = profile_picture_url
        return user

    existing = get_user_by_email(db, email)
    if existing:
        if existing.external_provider != provider:
            logger.warning(
                f"Login for {mask_email(email)} via {provider} rejected: "
                f"account registered with {existing.external_provider}"
            )
            raise AccountConflictError(existing.external_provider)
        logger.info(f"Updating external id for {mask_email(email)} ({provider})")
        existing.external_user_id = external_user_id
        existing.name = name
        existing.profile_picture_url = profile_picture_url
        return existing

    user = User(
        email=email,
        name=name,
        profile_picture_url=profile_picture_url,
        external_provider=provider,
        external_user_id=external_user_id,
    )
    db.add(user)
    logger.info(f"New user created for {mask_email(email)} via {provider}")
    return user


def get_or_create_external_user(
    db: Session,
    provider: str,
    external_user_id: str,
    email: str,
    name: str,
    profile_picture_url: str | None = None,
) -> User:
    """Find or create the user for an external identity.

    Two concurrent first logins for the same identity can both try to insert;
    the loser hits a unique constraint, rolls back and re-reads once.
    """
    user = _find_or_stage_user(db, provider, external_user_id, email, name, profile_picture_url)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Concurrent provisioning for {mask_email(email)}, retrying once")
        user = _find_or_stage_user(db, provider, external_user_id, email, name, profile_picture_url)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise UserProvisioningError(f"Could not provision user {mask_email(email)}") from e
    db.refresh(user)
    return user
