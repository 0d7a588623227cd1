"""Delayed removal of bought items."""

import logging
import uuid
from collections.abc import Callable
from typing import Any

from sqlalchemy.orm import Session

from cartmate.models.grocery_list import GroceryList
from cartmate.models.item import GroceryItem
from cartmate.services.realtime import ListEventType

logger = logging.getLogger(__name__)

Publisher = Callable[[uuid.UUID, ListEventType, Any], None]


def attempt_delete_if_still_bought(
    db: Session, item_id: uuid.UUID, list_id: uuid.UUID, publish: Publisher
) -> bool:
    """Delete a bought item once its auto-remove delay has passed.

    The item is only deleted if the list still exists, still has auto-remove
    enabled and the item is still marked bought. On deletion an ItemRemoved
    event is published to the list's room.

    Returns:
        True if the item was deleted
    """
    grocery_list = db.query(GroceryList).filter(GroceryList.id == list_id).first()
    if grocery_list is None:
        logger.warning(f"List {list_id} not found during bought item cleanup")
        return False

    if not grocery_list.auto_remove_bought_items_enabled:
        logger.info(f"Auto-remove disabled for list {list_id}, skipping item {item_id}")
        return False

    item = (
        db.query(GroceryItem)
        .filter(GroceryItem.id == item_id, GroceryItem.list_id == list_id)
        .first()
    )
    if item is None:
        logger.info(f"Item {item_id} not found, may have been deleted manually")
        return False

    if not item.is_bought:
        logger.info(f"Item {item_id} is no longer bought, skipping deletion")
        return False

    db.delete(item)
    db.commit()
    logger.info(f"Auto-deleted bought item {item_id} from list {list_id}")

    publish(list_id, ListEventType.ITEM_REMOVED, {"id": str(item_id)})
    return True
