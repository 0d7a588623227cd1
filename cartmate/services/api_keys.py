"""API key generation and validation."""

import hashlib
import secrets
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from cartmate.models.api_key import ApiKey


def generate_api_key() -> str:
    """Generate a URL-safe key from 256 random bits."""
    return secrets.token_urlsafe(32)


def hash_api_key(raw_key: str) -> str:
    """Hash a key for storage. Keys are high-entropy, so an unsalted digest is enough."""
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def validate_api_key(db: Session, raw_key: str) -> ApiKey | None:
    """Look up a key by its hash and record when it was last used."""
    api_key = db.query(ApiKey).filter(ApiKey.key_hash == hash_api_key(raw_key)).first()
    if api_key is None:
        return None
    api_key.last_used_at = datetime.now(UTC)
    db.commit()
    db.refresh(api_key)
    return api_key
