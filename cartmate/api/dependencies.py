"""FastAPI dependencies for authentication, list access and real-time services."""

import uuid
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from cartmate.database import get_db
from cartmate.models.grocery_list import GroceryList
from cartmate.models.user import User
from cartmate.services import access
from cartmate.services.api_keys import validate_api_key
from cartmate.services.auth import principal_from_token
from cartmate.services.hub import ListHub
from cartmate.services.realtime import Broadcaster
from cartmate.services.store import SqlListStore

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    principal = principal_from_token(credentials.credentials)
    if principal is None:
        raise _unauthorized("Invalid authentication credentials")

    user = db.query(User).filter(User.id == principal.id).first()
    if user is None:
        raise _unauthorized("User not found")

    return user


def get_api_key_user(
    db: Annotated[Session, Depends(get_db)],
    x_api_key: Annotated[str | None, Header()] = None,
) -> User:
    """Authenticate an external integration by its X-API-Key header."""
    if not x_api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    api_key = validate_api_key(db, x_api_key)
    if api_key is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")

    return api_key.user


def get_hub(request: Request) -> ListHub:
    """Get the process-wide list hub."""
    return request.app.state.hub


def get_broadcaster(request: Request) -> Broadcaster:
    """Get the process-wide list event broadcaster."""
    return request.app.state.broadcaster


def _load_list(db: Session, list_id: uuid.UUID) -> tuple[GroceryList, list]:
    store = SqlListStore(db)
    grocery_list = store.get_list(list_id)
    if grocery_list is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="List not found")
    return grocery_list, store.get_shares_for_list(list_id)


def get_readable_list(db: Session, list_id: uuid.UUID, user: User) -> GroceryList:
    """Get a list the user owns or has any share on."""
    grocery_list, shares = _load_list(db, list_id)
    if not access.can_read(user.id, grocery_list, shares):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this list",
        )
    return grocery_list


def get_editable_list(db: Session, list_id: uuid.UUID, user: User) -> GroceryList:
    """Get a list the user owns or has an edit share on."""
    grocery_list, shares = _load_list(db, list_id)
    if not access.can_edit(user.id, grocery_list, shares):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to edit this list",
        )
    return grocery_list


def get_owned_list(db: Session, list_id: uuid.UUID, user: User) -> GroceryList:
    """Get a list the user owns. Deletion and sharing are never delegated."""
    grocery_list, _ = _load_list(db, list_id)
    if not access.is_owner(user.id, grocery_list):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can do this",
        )
    return grocery_list
