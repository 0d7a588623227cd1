"""User settings API endpoints: default list and API keys."""

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from cartmate.api.dependencies import get_current_user
from cartmate.database import get_db
from cartmate.models.api_key import ApiKey
from cartmate.models.user import User
from cartmate.schemas.settings import ApiKeyCreate, ApiKeyCreated, ApiKeyResponse, DefaultList
from cartmate.services import access
from cartmate.services.api_keys import generate_api_key, hash_api_key
from cartmate.services.store import SqlListStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


@router.get("/default-list", response_model=DefaultList)
def get_default_list(current_user: Annotated[User, Depends(get_current_user)]):
    """Get the list external integrations add items to."""
    return DefaultList(list_id=current_user.default_list_id)


@router.put("/default-list", response_model=DefaultList)
def set_default_list(
    data: DefaultList,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Set or clear the default list."""
    if data.list_id is not None:
        store = SqlListStore(db)
        grocery_list = store.get_list(data.list_id)
        if grocery_list is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="List not found")
        if not access.can_read(current_user.id, grocery_list, store.get_shares_for_list(data.list_id)):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You don't have access to this list",
            )

    current_user.default_list_id = data.list_id
    db.commit()
    return DefaultList(list_id=current_user.default_list_id)


@router.get("/api-keys", response_model=list[ApiKeyResponse])
def get_api_keys(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """List the current user's API keys."""
    return (
        db.query(ApiKey)
        .filter(ApiKey.user_id == current_user.id)
        .order_by(ApiKey.created_at)
        .all()
    )


@router.post("/api-keys", response_model=ApiKeyCreated, status_code=status.HTTP_201_CREATED)
def create_api_key(
    key_data: ApiKeyCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create an API key. The raw key is only shown in this response."""
    raw_key = generate_api_key()
    api_key = ApiKey(user_id=current_user.id, name=key_data.name, key_hash=hash_api_key(raw_key))
    db.add(api_key)
    db.commit()
    db.refresh(api_key)

    logger.info(f"User {current_user.id} created API key {api_key.id}")
    return ApiKeyCreated(
        id=api_key.id, name=api_key.name, key=raw_key, created_at=api_key.created_at
    )


@router.delete("/api-keys/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_api_key(
    key_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Revoke an API key."""
    api_key = (
        db.query(ApiKey).filter(ApiKey.id == key_id, ApiKey.user_id == current_user.id).first()
    )
    if not api_key:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="API key not found")

    db.delete(api_key)
    db.commit()
