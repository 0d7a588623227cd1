"""Item group API endpoints."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from cartmate.api.dependencies import get_current_user, get_editable_list, get_readable_list
from cartmate.database import get_db
from cartmate.models.item import GroceryItem, ItemGroup
from cartmate.models.user import User
from cartmate.schemas.group import GroupCreate, GroupResponse, GroupUpdate

router = APIRouter(prefix="/api/v1/lists/{list_id}/groups", tags=["groups"])


def build_group_response(db: Session, group: ItemGroup) -> GroupResponse:
    group_response = GroupResponse.model_validate(group)
    group_response.item_count = (
        db.query(func.count(GroceryItem.id)).filter(GroceryItem.group_id == group.id).scalar() or 0
    )
    return group_response


def get_group(db: Session, list_id: uuid.UUID, group_id: uuid.UUID) -> ItemGroup:
    """Get a group belonging to the given list."""
    group = (
        db.query(ItemGroup).filter(ItemGroup.id == group_id, ItemGroup.list_id == list_id).first()
    )
    if not group:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return group


@router.get("", response_model=list[GroupResponse])
def get_groups(
    list_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get all groups for a list in display order."""
    get_readable_list(db, list_id, current_user)

    groups = (
        db.query(ItemGroup)
        .filter(ItemGroup.list_id == list_id)
        .order_by(ItemGroup.sort_order, ItemGroup.created_at)
        .all()
    )
    return [build_group_response(db, group) for group in groups]


@router.get("/{group_id}", response_model=GroupResponse)
def get_group_detail(
    list_id: uuid.UUID,
    group_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a single group."""
    get_readable_list(db, list_id, current_user)
    return build_group_response(db, get_group(db, list_id, group_id))


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
def create_group(
    list_id: uuid.UUID,
    group_data: GroupCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a new group in a list."""
    get_editable_list(db, list_id, current_user)

    group = ItemGroup(
        list_id=list_id,
        name=group_data.name,
        icon=group_data.icon,
        color=group_data.color,
        sort_order=group_data.sort_order,
    )
    db.add(group)
    db.commit()
    db.refresh(group)
    return build_group_response(db, group)


@router.put("/{group_id}", response_model=GroupResponse)
def update_group(
    list_id: uuid.UUID,
    group_id: uuid.UUID,
    group_data: GroupUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update a group."""
    get_editable_list(db, list_id, current_user)
    group = get_group(db, list_id, group_id)

    group.name = group_data.name
    group.icon = group_data.icon
    group.color = group_data.color
    group.sort_order = group_data.sort_order

    db.commit()
    db.refresh(group)
    return build_group_response(db, group)


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(
    list_id: uuid.UUID,
    group_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a group. Its items stay on the list, ungrouped."""
    get_editable_list(db, list_id, current_user)
    group = get_group(db, list_id, group_id)

    db.query(GroceryItem).filter(GroceryItem.group_id == group_id).update(
        {GroceryItem.group_id: None}, synchronize_session="fetch"
    )
    db.delete(group)
    db.commit()
