"""WebSocket endpoint for real-time list presence and updates."""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from cartmate.database import get_db
from cartmate.services.auth import principal_from_token
from cartmate.services.connections import Connection
from cartmate.services.hub import ListHub
from cartmate.services.store import SqlListStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ws", tags=["websocket"])

PING_INTERVAL_SECONDS = 30


@router.websocket("")
async def websocket_lists(
    websocket: WebSocket,
    db: Annotated[Session, Depends(get_db)],
    token: str = Query(...),
) -> None:
    """WebSocket endpoint for list presence and item updates.

    Authentication via token query parameter (WebSocket doesn't support headers).
    After connecting, the client sends JoinList / LeaveList messages to move
    between lists and receives events for the list it is in.
    """
    principal = principal_from_token(token)
    if principal is None:
        await websocket.close(code=4001, reason="Invalid token")
        return

    store = SqlListStore(db)
    if store.get_user(principal.id) is None:
        await websocket.close(code=4001, reason="User not found")
        return

    await websocket.accept()

    hub: ListHub = websocket.app.state.hub
    connection = Connection(principal)
    hub.connect(connection)

    async def handle_outbox() -> None:
        """Write queued messages to the socket in enqueue order."""
        while True:
            message = await connection.next_message()
            if message is None:
                break
            await websocket.send_json(message)

    async def handle_ping() -> None:
        """Send periodic pings to keep connection alive."""
        while True:
            await asyncio.sleep(PING_INTERVAL_SECONDS)
            connection.send({"type": "ping"})

    async def handle_client() -> None:
        """Dispatch client requests until the socket closes."""
        while True:
            try:
                data = await websocket.receive_json()
            except WebSocketDisconnect:
                break
            except ValueError:
                logger.warning(f"Ignoring malformed message on connection {connection.connection_id}")
                continue

            if not isinstance(data, dict):
                continue

            message_type = data.get("type")
            if message_type == "JoinList":
                await hub.join_list(connection, data.get("list_id"), store)
            elif message_type == "LeaveList":
                hub.leave_list(connection, data.get("list_id"))
            elif message_type == "pong":
                continue  # Keepalive acknowledgment
            else:
                logger.debug(f"Ignoring unknown message type {message_type!r}")

    tasks = [
        asyncio.create_task(handle_outbox()),
        asyncio.create_task(handle_ping()),
        asyncio.create_task(handle_client()),
    ]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                exc = task.exception()
                if not isinstance(exc, WebSocketDisconnect):
                    logger.error(f"WebSocket error: {exc}", exc_info=exc)
    finally:
        # Must run before any await: the endpoint may itself be cancelled here
        hub.disconnect(connection)
        logger.info(f"WebSocket disconnected: user={principal.id}")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
