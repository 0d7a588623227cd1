"""Item API endpoints."""

import logging
import uuid
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from cartmate.api.dependencies import (
    get_broadcaster,
    get_current_user,
    get_editable_list,
    get_readable_list,
)
from cartmate.database import get_db
from cartmate.models.item import GroceryItem, ItemGroup
from cartmate.models.user import User
from cartmate.schemas.item import (
    ItemBoughtStatus,
    ItemBoughtUpdate,
    ItemCreate,
    ItemResponse,
    ItemUpdate,
)
from cartmate.services.realtime import Broadcaster, ListEventType
from cartmate.tasks.cleanup import schedule_bought_item_removal

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/lists/{list_id}/items", tags=["items"])


def build_item_response(item: GroceryItem) -> ItemResponse:
    item_response = ItemResponse.model_validate(item)
    item_response.group_name = item.group.name if item.group else None
    return item_response


def get_item(db: Session, list_id: uuid.UUID, item_id: uuid.UUID) -> GroceryItem:
    """Get an item belonging to the given list."""
    item = (
        db.query(GroceryItem)
        .filter(GroceryItem.id == item_id, GroceryItem.list_id == list_id)
        .first()
    )
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item


def validate_group(db: Session, list_id: uuid.UUID, group_id: uuid.UUID | None) -> None:
    """Items may only be placed in a group of the same list."""
    if group_id is None:
        return
    exists = (
        db.query(ItemGroup.id)
        .filter(ItemGroup.id == group_id, ItemGroup.list_id == list_id)
        .first()
    )
    if not exists:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid group ID")


@router.get("", response_model=list[ItemResponse])
def get_items(
    list_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get all items for a list, unbought first."""
    get_readable_list(db, list_id, current_user)

    items = (
        db.query(GroceryItem)
        .filter(GroceryItem.list_id == list_id)
        .order_by(GroceryItem.is_bought, GroceryItem.created_at)
        .all()
    )
    return [build_item_response(item) for item in items]


@router.get("/{item_id}", response_model=ItemResponse)
def get_item_detail(
    list_id: uuid.UUID,
    item_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a single item."""
    get_readable_list(db, list_id, current_user)
    return build_item_response(get_item(db, list_id, item_id))


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    list_id: uuid.UUID,
    item_data: ItemCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    broadcaster: Annotated[Broadcaster, Depends(get_broadcaster)],
):
    """Add an item to a list."""
    get_editable_list(db, list_id, current_user)
    validate_group(db, list_id, item_data.group_id)

    item = GroceryItem(
        list_id=list_id,
        name=item_data.name,
        description=item_data.description,
        quantity=item_data.quantity,
        unit=item_data.unit,
        group_id=item_data.group_id,
        is_bought=False,
    )
    db.add(item)
    db.commit()
    db.refresh(item)

    item_response = build_item_response(item)
    broadcaster.broadcast(list_id, ListEventType.ITEM_ADDED, item_response)
    return item_response


@router.put("/{item_id}", response_model=ItemResponse)
def update_item(
    list_id: uuid.UUID,
    item_id: uuid.UUID,
    item_data: ItemUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    broadcaster: Annotated[Broadcaster, Depends(get_broadcaster)],
):
    """Replace an item's editable fields."""
    get_editable_list(db, list_id, current_user)
    item = get_item(db, list_id, item_id)
    validate_group(db, list_id, item_data.group_id)

    item.name = item_data.name
    item.description = item_data.description
    item.quantity = item_data.quantity
    item.unit = item_data.unit
    item.group_id = item_data.group_id

    db.commit()
    db.refresh(item)

    item_response = build_item_response(item)
    broadcaster.broadcast(list_id, ListEventType.ITEM_UPDATED, item_response)
    return item_response


@router.patch("/{item_id}/bought", response_model=ItemResponse)
def mark_item_bought(
    list_id: uuid.UUID,
    item_id: uuid.UUID,
    bought_data: ItemBoughtUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    broadcaster: Annotated[Broadcaster, Depends(get_broadcaster)],
):
    """Mark an item bought or not bought."""
    grocery_list = get_editable_list(db, list_id, current_user)
    item = get_item(db, list_id, item_id)

    item.set_bought(bought_data.is_bought, datetime.now(UTC))

    db.commit()
    db.refresh(item)

    status_payload = ItemBoughtStatus(
        id=item.id,
        is_bought=item.is_bought,
        bought_at=item.bought_at,
        updated_at=item.updated_at,
    )
    broadcaster.broadcast(list_id, ListEventType.ITEM_BOUGHT_STATUS_CHANGED, status_payload)

    if item.is_bought and grocery_list.auto_remove_bought_items_enabled:
        schedule_bought_item_removal(
            item.id, list_id, grocery_list.auto_remove_bought_items_delay_minutes
        )

    return build_item_response(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    list_id: uuid.UUID,
    item_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    broadcaster: Annotated[Broadcaster, Depends(get_broadcaster)],
):
    """Remove an item from a list."""
    get_editable_list(db, list_id, current_user)
    item = get_item(db, list_id, item_id)

    db.delete(item)
    db.commit()

    broadcaster.broadcast(list_id, ListEventType.ITEM_REMOVED, {"id": str(item_id)})
