"""List share API endpoints (owner only)."""

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from cartmate.api.dependencies import get_current_user, get_owned_list
from cartmate.database import get_db
from cartmate.models.grocery_list import GroceryList, ListShare
from cartmate.models.user import User
from cartmate.schemas.share import ListShareCreate, ListShareResponse, ListShareUpdate
from cartmate.services.auth import get_user_by_email

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/lists/{list_id}/shares", tags=["shares"])


def build_share_response(share: ListShare, grocery_list: GroceryList) -> ListShareResponse:
    return ListShareResponse(
        id=share.id,
        list_id=grocery_list.id,
        list_name=grocery_list.name,
        user_id=share.user_id,
        user_email=share.user.email,
        user_name=share.user.name,
        can_edit=share.can_edit,
        shared_at=share.shared_at,
    )


def get_share(db: Session, list_id: uuid.UUID, share_id: uuid.UUID) -> ListShare:
    share = (
        db.query(ListShare).filter(ListShare.id == share_id, ListShare.list_id == list_id).first()
    )
    if not share:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Share not found")
    return share


@router.get("", response_model=list[ListShareResponse])
def get_shares(
    list_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get everyone a list is shared with."""
    grocery_list = get_owned_list(db, list_id, current_user)
    shares = (
        db.query(ListShare)
        .filter(ListShare.list_id == list_id)
        .order_by(ListShare.shared_at)
        .all()
    )
    return [build_share_response(share, grocery_list) for share in shares]


@router.post("", response_model=ListShareResponse, status_code=status.HTTP_201_CREATED)
def create_share(
    list_id: uuid.UUID,
    share_data: ListShareCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Share a list with another user by e-mail."""
    grocery_list = get_owned_list(db, list_id, current_user)

    share_user = get_user_by_email(db, share_data.user_email)
    if not share_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User not found",
        )

    if share_user.id == grocery_list.owner_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot share a list with its owner",
        )

    existing_share = (
        db.query(ListShare)
        .filter(ListShare.list_id == list_id, ListShare.user_id == share_user.id)
        .first()
    )
    if existing_share:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="List already shared with this user",
        )

    share = ListShare(list_id=list_id, user_id=share_user.id, can_edit=share_data.can_edit)
    db.add(share)
    db.commit()
    db.refresh(share)

    logger.info(f"List {list_id} shared with user {share_user.id} (can_edit={share.can_edit})")
    return build_share_response(share, grocery_list)


@router.put("/{share_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_share(
    list_id: uuid.UUID,
    share_id: uuid.UUID,
    share_data: ListShareUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Change whether a share allows editing."""
    get_owned_list(db, list_id, current_user)
    share = get_share(db, list_id, share_id)

    share.can_edit = share_data.can_edit
    db.commit()


@router.delete("/{share_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_share(
    list_id: uuid.UUID,
    share_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Revoke a user's access. Takes effect on their next request."""
    get_owned_list(db, list_id, current_user)
    share = get_share(db, list_id, share_id)

    db.delete(share)
    db.commit()
    logger.info(f"Share {share_id} on list {list_id} revoked")
