"""Celery tasks for removing bought items after a delay."""

import logging
import uuid

from sqlalchemy.orm import Session

from cartmate.celery_app import app as celery_app
from cartmate.database import SessionLocal
from cartmate.services.cleanup import attempt_delete_if_still_bought
from cartmate.services.realtime import publish_list_event

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=2)
def delete_bought_item(self, item_id: str, list_id: str) -> dict:
    """Delete an item if it is still bought when its auto-remove delay expires.

    Args:
        item_id: ID of the bought item
        list_id: ID of the list containing the item

    Returns:
        dict with the outcome
    """
    db: Session = SessionLocal()
    try:
        deleted = attempt_delete_if_still_bought(
            db, uuid.UUID(item_id), uuid.UUID(list_id), publish_list_event
        )
        return {"success": True, "item_id": item_id, "deleted": deleted}

    except Exception as e:
        logger.error(f"Error auto-deleting item {item_id} from list {list_id}: {e}", exc_info=True)
        db.rollback()

        if self.request.retries < self.max_retries:
            raise self.retry(exc=e, countdown=30)

        return {"error": str(e)}

    finally:
        db.close()


def schedule_bought_item_removal(
    item_id: uuid.UUID, list_id: uuid.UUID, delay_minutes: int
) -> None:
    """Queue delete_bought_item to run after the list's configured delay."""
    try:
        delete_bought_item.apply_async(
            args=[str(item_id), str(list_id)], countdown=delay_minutes * 60
        )
        logger.info(f"Scheduled removal of item {item_id} in {delay_minutes} minutes")
    except Exception as e:
        # The item stays on the list; marking it bought still succeeds
        logger.error(f"Failed to schedule removal of item {item_id}: {e}")
