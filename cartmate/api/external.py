"""External integration endpoints authenticated by API key."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from cartmate.api.dependencies import get_api_key_user, get_broadcaster, get_editable_list
from cartmate.api.items import build_item_response
from cartmate.database import get_db
from cartmate.models.item import GroceryItem
from cartmate.models.user import User
from cartmate.schemas.settings import ExternalAddItem, ExternalAddItemResponse
from cartmate.services.realtime import Broadcaster, ListEventType

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/external", tags=["external"])


@router.post(
    "/add-item", response_model=ExternalAddItemResponse, status_code=status.HTTP_201_CREATED
)
def add_item(
    data: ExternalAddItem,
    current_user: Annotated[User, Depends(get_api_key_user)],
    db: Annotated[Session, Depends(get_db)],
    broadcaster: Annotated[Broadcaster, Depends(get_broadcaster)],
):
    """Add an item to the given list, or to the key owner's default list."""
    list_id = data.list_id or current_user.default_list_id
    if list_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No list specified and no default list configured",
        )

    get_editable_list(db, list_id, current_user)

    item = GroceryItem(list_id=list_id, name=data.item_name, quantity=1, is_bought=False)
    db.add(item)
    db.commit()
    db.refresh(item)

    item_response = build_item_response(item)
    broadcaster.broadcast(list_id, ListEventType.ITEM_ADDED, item_response)
    logger.info(f"External add: '{item.name}' to list {list_id} by user {current_user.id}")
    return ExternalAddItemResponse(success=True, item=item_response)
