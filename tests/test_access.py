"""Tests for the list access policy."""

import uuid
from types import SimpleNamespace

from cartmate.services import access


def make_list(owner_id):
    return SimpleNamespace(id=uuid.uuid4(), owner_id=owner_id)


def make_share(grocery_list, user_id, can_edit):
    return SimpleNamespace(list_id=grocery_list.id, user_id=user_id, can_edit=can_edit)


class TestAccessPolicy:
    """Tests for can_read / can_edit."""

    def test_owner_can_read_and_edit(self):
        owner = uuid.uuid4()
        grocery_list = make_list(owner)

        assert access.can_read(owner, grocery_list, [])
        assert access.can_edit(owner, grocery_list, [])

    def test_stranger_has_no_access(self):
        grocery_list = make_list(uuid.uuid4())
        stranger = uuid.uuid4()

        assert not access.can_read(stranger, grocery_list, [])
        assert not access.can_edit(stranger, grocery_list, [])

    def test_viewer_share_grants_read_only(self):
        grocery_list = make_list(uuid.uuid4())
        viewer = uuid.uuid4()
        shares = [make_share(grocery_list, viewer, can_edit=False)]

        assert access.can_read(viewer, grocery_list, shares)
        assert not access.can_edit(viewer, grocery_list, shares)

    def test_editor_share_grants_edit(self):
        grocery_list = make_list(uuid.uuid4())
        editor = uuid.uuid4()
        shares = [make_share(grocery_list, editor, can_edit=True)]

        assert access.can_read(editor, grocery_list, shares)
        assert access.can_edit(editor, grocery_list, shares)

    def test_share_on_another_list_is_ignored(self):
        """A share only applies to the list it was granted on."""
        grocery_list = make_list(uuid.uuid4())
        other_list = make_list(uuid.uuid4())
        user = uuid.uuid4()
        shares = [make_share(other_list, user, can_edit=True)]

        assert not access.can_read(user, grocery_list, shares)
        assert not access.can_edit(user, grocery_list, shares)

    def test_owner_without_share_still_owner(self):
        owner = uuid.uuid4()
        grocery_list = make_list(owner)
        shares = [make_share(grocery_list, uuid.uuid4(), can_edit=False)]

        assert access.is_owner(owner, grocery_list)
        assert access.find_share(owner, grocery_list, shares) is None
        assert access.can_edit(owner, grocery_list, shares)

    def test_decision_reflects_current_shares(self):
        """Nothing is cached between calls."""
        grocery_list = make_list(uuid.uuid4())
        user = uuid.uuid4()
        shares = [make_share(grocery_list, user, can_edit=True)]

        assert access.can_edit(user, grocery_list, shares)
        shares.clear()
        assert not access.can_edit(user, grocery_list, shares)
