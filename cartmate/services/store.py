"""Read-only persistence lookups used by the access policy and the list hub."""

import uuid
from typing import Protocol

from sqlalchemy.orm import Session

from cartmate.models.grocery_list import GroceryList, ListShare
from cartmate.models.user import User


class ListStore(Protocol):
    """Lookups the real-time layer needs from the system of record."""

    def get_list(self, list_id: uuid.UUID) -> GroceryList | None: ...

    def get_shares_for_list(self, list_id: uuid.UUID) -> list[ListShare]: ...

    def get_user(self, user_id: uuid.UUID) -> User | None: ...


class SqlListStore:
    """ListStore backed by a SQLAlchemy session.

    Queries use populate_existing so a long-lived session still observes
    shares revoked or downgraded by other sessions.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_list(self, list_id: uuid.UUID) -> GroceryList | None:
        return (
            self.db.query(GroceryList)
            .populate_existing()
            .filter(GroceryList.id == list_id)
            .first()
        )

    def get_shares_for_list(self, list_id: uuid.UUID) -> list[ListShare]:
        return (
            self.db.query(ListShare).populate_existing().filter(ListShare.list_id == list_id).all()
        )

    def get_user(self, user_id: uuid.UUID) -> User | None:
        return self.db.query(User).populate_existing().filter(User.id == user_id).first()
