"""Live websocket connections and their outbound message queues."""

import asyncio
import logging
import threading
import uuid

from cartmate.services.auth import Principal

logger = logging.getLogger(__name__)

# Messages held for a client that is not reading before it gets dropped
OUTBOX_MAX_SIZE = 256


class Connection:
    """An authenticated client connection.

    Outbound messages go through an asyncio queue drained by a single writer
    task, so send() never blocks and never touches the socket. send() is
    thread-safe: REST handlers running in the threadpool can broadcast.
    A client that falls OUTBOX_MAX_SIZE messages behind is closed.
    """

    def __init__(
        self,
        principal: Principal,
        loop: asyncio.AbstractEventLoop | None = None,
        connection_id: str | None = None,
        max_queue: int = OUTBOX_MAX_SIZE,
    ) -> None:
        self.connection_id = connection_id or uuid.uuid4().hex
        self.principal = principal
        self._loop = loop or asyncio.get_running_loop()
        self._outbox: asyncio.Queue[dict | None] = asyncio.Queue(maxsize=max_queue)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, message: dict) -> None:
        """Queue a message for delivery. Dropped silently once closed."""
        if self._closed:
            return
        try:
            self._loop.call_soon_threadsafe(self._enqueue, message)
        except RuntimeError:
            # Event loop already shut down
            logger.warning(f"Dropping message for connection {self.connection_id}: loop closed")
            self._closed = True

    async def next_message(self) -> dict | None:
        """Wait for the next queued message; None once the connection is closed."""
        return await self._outbox.get()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._loop.call_soon_threadsafe(self._enqueue, None)
        except RuntimeError:
            logger.debug(f"Connection {self.connection_id} closed after its loop shut down")

    def _enqueue(self, message: dict | None) -> None:
        # Runs on the connection's event loop
        if self._closed and message is not None:
            return
        try:
            self._outbox.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(
                f"Outbox full for connection {self.connection_id} "
                f"(user={self.principal.id}); closing"
            )
            self._closed = True
            while not self._outbox.empty():
                self._outbox.get_nowait()
            self._outbox.put_nowait(None)


class ConnectionManager:
    """Registry of accepted connections by id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._connections: dict[str, Connection] = {}

    def register(self, connection: Connection) -> None:
        with self._lock:
            self._connections[connection.connection_id] = connection

    def unregister(self, connection_id: str) -> Connection | None:
        with self._lock:
            return self._connections.pop(connection_id, None)

    def get(self, connection_id: str) -> Connection | None:
        with self._lock:
            return self._connections.get(connection_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
