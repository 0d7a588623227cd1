"""List hub: the per-connection real-time protocol.

A connection moves between Connected and Joined(list) any number of times and
ends Disconnected. Joining a list while already in another one leaves the
first list. Rejected joins are logged and dropped without a reply so clients
learn nothing about lists they cannot read.
"""

import logging
import threading
import uuid

from starlette.concurrency import run_in_threadpool

from cartmate.services import access
from cartmate.services.connections import Connection, ConnectionManager
from cartmate.services.presence import PresenceEntry, PresenceRegistry
from cartmate.services.realtime import Broadcaster, ListEventType
from cartmate.services.store import ListStore

logger = logging.getLogger(__name__)


def parse_list_id(raw_list_id: object) -> uuid.UUID | None:
    """Parse a client-supplied list id, returning None when malformed."""
    try:
        return uuid.UUID(str(raw_list_id))
    except ValueError:
        return None


def resolve_member(
    store: ListStore, list_id: uuid.UUID, user_id: uuid.UUID
) -> tuple[uuid.UUID, str] | None:
    """Check read access and resolve the user's display name.

    Returns (user_id, user_name), or None if the list is missing, the user
    cannot read it, or the user record is gone.
    """
    grocery_list = store.get_list(list_id)
    if grocery_list is None:
        logger.warning(f"User {user_id} attempted to join missing list {list_id}")
        return None
    if not access.can_read(user_id, grocery_list, store.get_shares_for_list(list_id)):
        logger.warning(f"User {user_id} attempted to join list {list_id} without access")
        return None
    user = store.get_user(user_id)
    if user is None:
        logger.warning(f"User {user_id} not found")
        return None
    return user.id, user.name


class ListHub:
    """Coordinates presence and join/leave notifications for list rooms."""

    def __init__(
        self,
        registry: PresenceRegistry,
        connections: ConnectionManager,
        broadcaster: Broadcaster,
    ) -> None:
        self.registry = registry
        self.connections = connections
        self.broadcaster = broadcaster
        # Registry mutations and their notifications are enqueued together so
        # every room member sees join/leave events in registry order.
        self._sequence_lock = threading.Lock()

    def connect(self, connection: Connection) -> None:
        self.connections.register(connection)
        logger.info(
            f"Connection {connection.connection_id} opened for user {connection.principal.id}"
        )

    async def join_list(self, connection: Connection, raw_list_id: object, store: ListStore) -> bool:
        """Handle a JoinList request. Returns True if the connection joined."""
        list_id = parse_list_id(raw_list_id)
        if list_id is None:
            logger.warning(f"Invalid list ID format: {raw_list_id!r}")
            return False

        member = await run_in_threadpool(resolve_member, store, list_id, connection.principal.id)
        if member is None:
            return False
        user_id, user_name = member

        with self._sequence_lock:
            previous = self.registry.join(connection.connection_id, list_id, user_id, user_name)
            if previous is not None:
                self._notify_left(previous)
            self.broadcaster.broadcast(
                list_id,
                ListEventType.USER_JOINED,
                {"user_id": str(user_id), "user_name": user_name},
                exclude=connection.connection_id,
            )
            active_users = [user.to_dict() for user in self.registry.active_users(list_id)]
            self.broadcaster.send_to(
                connection.connection_id, list_id, ListEventType.ACTIVE_USERS, active_users
            )

        logger.info(f"User {user_name} ({user_id}) joined list {list_id}")
        return True

    def leave_list(self, connection: Connection, raw_list_id: object) -> PresenceEntry | None:
        """Handle a LeaveList request for the list the connection is in."""
        list_id = parse_list_id(raw_list_id)
        if list_id is None:
            logger.warning(f"Invalid list ID format: {raw_list_id!r}")
            return None

        with self._sequence_lock:
            if self.registry.current_list(connection.connection_id) != list_id:
                return None
            entry = self.registry.leave(connection.connection_id)
            if entry is not None:
                self._notify_left(entry)
        return entry

    def disconnect(self, connection: Connection) -> PresenceEntry | None:
        """Clean up after the transport closed. Safe to call more than once."""
        with self._sequence_lock:
            entry = self.registry.on_disconnect(connection.connection_id)
            if entry is not None:
                self._notify_left(entry)
        self.connections.unregister(connection.connection_id)
        connection.close()
        logger.info(f"Connection {connection.connection_id} closed")
        return entry

    def _notify_left(self, entry: PresenceEntry) -> None:
        self.broadcaster.broadcast(
            entry.list_id,
            ListEventType.USER_LEFT,
            {"user_id": str(entry.user_id), "user_name": entry.user_name},
        )
        logger.info(f"User {entry.user_name} ({entry.user_id}) left list {entry.list_id}")
