"""List API endpoints."""

import logging
import secrets
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from cartmate.api.dependencies import (
    get_current_user,
    get_editable_list,
    get_hub,
    get_owned_list,
    get_readable_list,
)
from cartmate.config import get_settings
from cartmate.database import get_db
from cartmate.models.grocery_list import GroceryList, ListShare
from cartmate.models.item import GroceryItem
from cartmate.models.user import User
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
from cartmate.services import access
from cartmate.services.hub import ListHub

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/lists", tags=["lists"])
settings = get_settings()


def build_list_response(db: Session, grocery_list: GroceryList, user: User) -> ListResponse:
    """Build a list response with item counts and the caller's edit permission."""
    item_count, bought_count = (
        db.query(
            func.count(GroceryItem.id),
            func.count(GroceryItem.id).filter(GroceryItem.is_bought.is_(True)),
        )
        .filter(GroceryItem.list_id == grocery_list.id)
        .one()
    )
    shares = db.query(ListShare).filter(ListShare.list_id == grocery_list.id).all()

    list_response = ListResponse.model_validate(grocery_list)
    list_response.owner_name = grocery_list.owner.name if grocery_list.owner else ""
    list_response.item_count = item_count or 0
    list_response.bought_item_count = bought_count or 0
    list_response.is_shared = bool(shares)
    list_response.can_edit = access.can_edit(user.id, grocery_list, shares)
    return list_response


@router.get("", response_model=list[ListResponse])
def get_lists(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get all lists owned by or shared with the current user."""
    shared_list_ids = db.query(ListShare.list_id).filter(ListShare.user_id == current_user.id)
    lists = (
        db.query(GroceryList)
        .filter(
            or_(
                GroceryList.owner_id == current_user.id,
                GroceryList.id.in_(shared_list_ids),
            )
        )
        .order_by(GroceryList.created_at)
        .all()
    )
    return [build_list_response(db, lst, current_user) for lst in lists]


@router.post("", response_model=ListResponse, status_code=status.HTTP_201_CREATED)
def create_list(
    list_data: ListCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a new list."""
    new_list = GroceryList(
        name=list_data.name,
        description=list_data.description,
        owner_id=current_user.id,
    )
    db.add(new_list)
    db.commit()
    db.refresh(new_list)

    return build_list_response(db, new_list, current_user)


@router.post("/accept-share/{token}", response_model=AcceptShareResponse)
def accept_share(
    token: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Redeem a magic link. The first new member to redeem it consumes the token."""
    grocery_list = db.query(GroceryList).filter(GroceryList.share_token == token).first()
    if grocery_list is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid or expired share link",
        )

    response = AcceptShareResponse(
        list_id=grocery_list.id,
        list_name=grocery_list.name,
        owner_name=grocery_list.owner.name,
    )

    # Owner and existing members don't consume the link
    shares = db.query(ListShare).filter(ListShare.list_id == grocery_list.id).all()
    if access.can_read(current_user.id, grocery_list, shares):
        return response

    can_edit = grocery_list.share_token_can_edit

    # Only the redeemer whose UPDATE still matches the token gets the share
    consumed = (
        db.query(GroceryList)
        .filter(GroceryList.id == grocery_list.id, GroceryList.share_token == token)
        .update(
            {GroceryList.share_token: None, GroceryList.share_token_can_edit: False},
            synchronize_session=False,
        )
    )
    if consumed != 1:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid or expired share link",
        )

    db.add(ListShare(list_id=grocery_list.id, user_id=current_user.id, can_edit=can_edit))
    db.commit()

    logger.info(f"User {current_user.id} joined list {grocery_list.id} via magic link")
    return response


@router.get("/{list_id}", response_model=ListResponse)
def get_list(
    list_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a specific list."""
    grocery_list = get_readable_list(db, list_id, current_user)
    return build_list_response(db, grocery_list, current_user)


@router.put("/{list_id}", response_model=ListResponse)
def update_list(
    list_id: uuid.UUID,
    list_data: ListUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update a list's name and description (owner or editor)."""
    grocery_list = get_editable_list(db, list_id, current_user)

    grocery_list.name = list_data.name
    grocery_list.description = list_data.description

    db.commit()
    db.refresh(grocery_list)
    return build_list_response(db, grocery_list, current_user)


@router.put("/{list_id}/settings", response_model=ListResponse)
def update_list_settings(
    list_id: uuid.UUID,
    settings_data: ListSettingsUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update auto-remove settings (owner only)."""
    grocery_list = get_owned_list(db, list_id, current_user)

    grocery_list.auto_remove_bought_items_enabled = settings_data.auto_remove_bought_items_enabled
    grocery_list.auto_remove_bought_items_delay_minutes = (
        settings_data.auto_remove_bought_items_delay_minutes
    )

    db.commit()
    db.refresh(grocery_list)
    return build_list_response(db, grocery_list, current_user)


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_list(
    list_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a list with its items, groups and shares (owner only)."""
    grocery_list = get_owned_list(db, list_id, current_user)

    db.query(User).filter(User.default_list_id == list_id).update(
        {User.default_list_id: None}, synchronize_session="fetch"
    )
    db.delete(grocery_list)
    db.commit()
    logger.info(f"User {current_user.id} deleted list {list_id}")


@router.post("/{list_id}/magic-link", response_model=MagicLinkResponse)
def generate_magic_link(
    list_id: uuid.UUID,
    link_data: MagicLinkCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Generate a single-use share link (owner only). Replaces any unused link."""
    grocery_list = get_owned_list(db, list_id, current_user)

    grocery_list.share_token = secrets.token_urlsafe(32)
    grocery_list.share_token_can_edit = link_data.can_edit
    db.commit()

    share_url = f"{settings.public_base_url.rstrip('/')}/share/{grocery_list.share_token}"
    return MagicLinkResponse(
        token=grocery_list.share_token,
        share_url=share_url,
        can_edit=grocery_list.share_token_can_edit,
    )


@router.get("/{list_id}/active-users", response_model=list[ActiveUserResponse])
def get_active_users(
    list_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    hub: Annotated[ListHub, Depends(get_hub)],
):
    """Get the users currently viewing a list."""
    get_readable_list(db, list_id, current_user)
    return [
        ActiveUserResponse(user_id=user.user_id, user_name=user.user_name)
        for user in hub.registry.active_users(list_id)
    ]
