"""In-memory presence tracking for list rooms."""

import logging
import threading
import uuid
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PresenceEntry:
    """Who a connection belongs to and which list it is viewing."""

    connection_id: str
    user_id: uuid.UUID
    user_name: str
    list_id: uuid.UUID


@dataclass(frozen=True)
class ActiveUser:
    """A distinct user currently viewing a list."""

    user_id: uuid.UUID
    user_name: str

    def to_dict(self) -> dict:
        return {"user_id": str(self.user_id), "user_name": self.user_name}


class PresenceRegistry:
    """Tracks which connections are joined to which list.

    Holds two maps, list -> connection ids and connection id -> entry, and
    mutates both under a single lock so neither is ever observable without
    the other. A connection is joined to at most one list at a time. Unknown
    connections and lists are no-ops, never errors.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # Dicts used as ordered sets: iteration follows join order
        self._list_connections: dict[uuid.UUID, dict[str, None]] = {}
        self._connections: dict[str, PresenceEntry] = {}

    def join(
        self, connection_id: str, list_id: uuid.UUID, user_id: uuid.UUID, user_name: str
    ) -> PresenceEntry | None:
        """Register a connection in a list's room.

        Returns the entry the connection was removed from if it was joined to
        a different list, so the caller can notify that room.
        """
        entry = PresenceEntry(connection_id, user_id, user_name, list_id)
        with self._lock:
            previous = self._connections.get(connection_id)
            if previous is not None and previous.list_id != list_id:
                self._discard(previous)
            else:
                previous = None
            self._list_connections.setdefault(list_id, {})[connection_id] = None
            self._connections[connection_id] = entry
        return previous

    def leave(self, connection_id: str) -> PresenceEntry | None:
        """Remove a connection from whatever list it is joined to."""
        with self._lock:
            entry = self._connections.get(connection_id)
            if entry is None:
                return None
            self._discard(entry)
            return entry

    def on_disconnect(self, connection_id: str) -> PresenceEntry | None:
        """Transport-level disconnect: same cleanup as leave, safe to repeat."""
        return self.leave(connection_id)

    def current_list(self, connection_id: str) -> uuid.UUID | None:
        with self._lock:
            entry = self._connections.get(connection_id)
            return entry.list_id if entry else None

    def members(self, list_id: uuid.UUID) -> list[str]:
        """Snapshot of connection ids in a list's room."""
        with self._lock:
            return list(self._list_connections.get(list_id, ()))

    def active_users(self, list_id: uuid.UUID) -> list[ActiveUser]:
        """Distinct users in a list's room, in first-joined order."""
        with self._lock:
            seen: dict[uuid.UUID, ActiveUser] = {}
            for connection_id in self._list_connections.get(list_id, ()):
                entry = self._connections[connection_id]
                if entry.user_id not in seen:
                    seen[entry.user_id] = ActiveUser(entry.user_id, entry.user_name)
            return list(seen.values())

    def snapshot(self) -> tuple[dict[uuid.UUID, set[str]], dict[str, uuid.UUID]]:
        """Consistent copy of both maps (list -> connections, connection -> list)."""
        with self._lock:
            rooms = {list_id: set(conns) for list_id, conns in self._list_connections.items()}
            reverse = {cid: entry.list_id for cid, entry in self._connections.items()}
            return rooms, reverse

    def _discard(self, entry: PresenceEntry) -> None:
        # Caller holds the lock
        room = self._list_connections.get(entry.list_id)
        if room is not None:
            room.pop(entry.connection_id, None)
            if not room:
                del self._list_connections[entry.list_id]
        self._connections.pop(entry.connection_id, None)
