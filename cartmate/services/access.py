"""Access policy for grocery lists.

Pure decision functions over the current persisted state of a list and its
shares. Callers load fresh state for every check; nothing here caches.
"""

import uuid
from collections.abc import Iterable
from typing import Protocol


class ListLike(Protocol):
    id: uuid.UUID
    owner_id: uuid.UUID


class ShareLike(Protocol):
    list_id: uuid.UUID
    user_id: uuid.UUID
    can_edit: bool


def is_owner(principal_id: uuid.UUID, grocery_list: ListLike) -> bool:
    """Check whether the principal owns the list."""
    return grocery_list.owner_id == principal_id


def find_share(
    principal_id: uuid.UUID, grocery_list: ListLike, shares: Iterable[ShareLike]
) -> ShareLike | None:
    """Return the principal's share for this list, if any."""
    for share in shares:
        if share.list_id == grocery_list.id and share.user_id == principal_id:
            return share
    return None


def can_read(principal_id: uuid.UUID, grocery_list: ListLike, shares: Iterable[ShareLike]) -> bool:
    """Owner or any share holder may read."""
    if is_owner(principal_id, grocery_list):
        return True
    return find_share(principal_id, grocery_list, shares) is not None


def can_edit(principal_id: uuid.UUID, grocery_list: ListLike, shares: Iterable[ShareLike]) -> bool:
    """Owner or a share holder with can_edit may modify items, groups and list details."""
    if is_owner(principal_id, grocery_list):
        return True
    share = find_share(principal_id, grocery_list, shares)
    return share is not None and share.can_edit
