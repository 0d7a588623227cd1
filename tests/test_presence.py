"""Tests for the presence registry."""

import random
import threading
import uuid

from cartmate.services.presence import ActiveUser, PresenceRegistry


class TestPresenceRegistry:
    """Tests for join / leave / active users."""

    def test_join_registers_both_directions(self):
        registry = PresenceRegistry()
        list_id = uuid.uuid4()
        user_id = uuid.uuid4()

        previous = registry.join("c1", list_id, user_id, "Alice")

        assert previous is None
        assert registry.current_list("c1") == list_id
        assert registry.members(list_id) == ["c1"]

    def test_join_other_list_moves_connection(self):
        """A connection is never in two rooms at once."""
        registry = PresenceRegistry()
        first, second = uuid.uuid4(), uuid.uuid4()
        user_id = uuid.uuid4()

        registry.join("c1", first, user_id, "Alice")
        previous = registry.join("c1", second, user_id, "Alice")

        assert previous is not None
        assert previous.list_id == first
        assert registry.members(first) == []
        assert registry.members(second) == ["c1"]
        assert registry.current_list("c1") == second

    def test_rejoin_same_list_is_idempotent(self):
        registry = PresenceRegistry()
        list_id = uuid.uuid4()
        user_id = uuid.uuid4()

        registry.join("c1", list_id, user_id, "Alice")
        previous = registry.join("c1", list_id, user_id, "Alice")

        assert previous is None
        assert registry.members(list_id) == ["c1"]

    def test_leave_returns_removed_entry(self):
        registry = PresenceRegistry()
        list_id = uuid.uuid4()
        user_id = uuid.uuid4()
        registry.join("c1", list_id, user_id, "Alice")

        entry = registry.leave("c1")

        assert entry.user_id == user_id
        assert entry.user_name == "Alice"
        assert entry.list_id == list_id
        assert registry.current_list("c1") is None
        assert registry.members(list_id) == []

    def test_unknown_connection_is_noop(self):
        registry = PresenceRegistry()

        assert registry.leave("missing") is None
        assert registry.on_disconnect("missing") is None
        assert registry.current_list("missing") is None
        assert registry.members(uuid.uuid4()) == []
        assert registry.active_users(uuid.uuid4()) == []

    def test_disconnect_is_exactly_once(self):
        registry = PresenceRegistry()
        registry.join("c1", uuid.uuid4(), uuid.uuid4(), "Alice")

        assert registry.leave("c1") is not None
        assert registry.on_disconnect("c1") is None

    def test_active_users_deduplicates_by_user(self):
        """Two tabs of the same user show up once."""
        registry = PresenceRegistry()
        list_id = uuid.uuid4()
        alice, bob = uuid.uuid4(), uuid.uuid4()

        registry.join("tab1", list_id, alice, "Alice")
        registry.join("tab2", list_id, alice, "Alice")
        registry.join("c3", list_id, bob, "Bob")

        assert registry.active_users(list_id) == [
            ActiveUser(alice, "Alice"),
            ActiveUser(bob, "Bob"),
        ]

        registry.leave("tab1")
        assert [u.user_id for u in registry.active_users(list_id)] == [alice, bob]

    def test_active_user_to_dict(self):
        user_id = uuid.uuid4()
        assert ActiveUser(user_id, "Alice").to_dict() == {
            "user_id": str(user_id),
            "user_name": "Alice",
        }

    def test_concurrent_operations_keep_maps_consistent(self):
        """Random joins, leaves and disconnects from many threads."""
        registry = PresenceRegistry()
        lists = [uuid.uuid4() for _ in range(4)]
        connection_ids = [f"c{i}" for i in range(20)]
        users = {cid: uuid.uuid4() for cid in connection_ids}

        def worker(seed: int) -> None:
            rng = random.Random(seed)
            for _ in range(500):
                cid = rng.choice(connection_ids)
                op = rng.random()
                if op < 0.6:
                    registry.join(cid, rng.choice(lists), users[cid], cid)
                elif op < 0.8:
                    registry.leave(cid)
                else:
                    registry.on_disconnect(cid)

        threads = [threading.Thread(target=worker, args=(seed,)) for seed in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        rooms, reverse = registry.snapshot()
        for list_id, members in rooms.items():
            assert members, "empty rooms are removed"
            for cid in members:
                assert reverse[cid] == list_id
        for cid, list_id in reverse.items():
            assert cid in rooms[list_id]
            assert sum(cid in members for members in rooms.values()) == 1
