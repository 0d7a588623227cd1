"""Real-time list events: in-process fan-out plus a Redis relay for worker processes."""

import asyncio
import json
import logging
import uuid
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import redis
import redis.asyncio as aioredis
from fastapi.encoders import jsonable_encoder

from cartmate.config import get_settings
from cartmate.services.connections import ConnectionManager
from cartmate.services.presence import PresenceRegistry

if TYPE_CHECKING:
    from redis.asyncio.client import PubSub

logger = logging.getLogger(__name__)
settings = get_settings()

CHANNEL_PREFIX = "list:"
RELAY_RETRY_SECONDS = 5


class ListEventType(StrEnum):
    """Event types sent to clients in a list's room."""

    # Presence events
    USER_JOINED = "UserJoined"
    USER_LEFT = "UserLeft"
    ACTIVE_USERS = "ActiveUsers"

    # Item events
    ITEM_ADDED = "ItemAdded"
    ITEM_UPDATED = "ItemUpdated"
    ITEM_BOUGHT_STATUS_CHANGED = "ItemBoughtStatusChanged"
    ITEM_REMOVED = "ItemRemoved"


def build_message(list_id: uuid.UUID, event_type: ListEventType, data: Any = None) -> dict:
    """Build the JSON envelope sent to clients."""
    return {
        "type": str(event_type),
        "list_id": str(list_id),
        "timestamp": datetime.now(UTC).isoformat(),
        "data": jsonable_encoder(data if data is not None else {}),
    }


class Broadcaster:
    """Best-effort fan-out of list events to every connection in a list's room.

    No acknowledgements, retries or persistence: a client that misses events
    re-fetches list state after it rejoins. A failure on one connection never
    affects delivery to the others or the caller.
    """

    def __init__(self, registry: PresenceRegistry, connections: ConnectionManager) -> None:
        self.registry = registry
        self.connections = connections

    def broadcast(
        self,
        list_id: uuid.UUID,
        event_type: ListEventType,
        data: Any = None,
        exclude: str | None = None,
    ) -> int:
        """Send an event to the list's room. Returns the number of connections reached."""
        try:
            message = build_message(list_id, event_type, data)
        except Exception as e:
            logger.error(f"Failed to encode {event_type} for list {list_id}: {e}")
            return 0
        return self.deliver(list_id, message, exclude=exclude)

    def send_to(
        self, connection_id: str, list_id: uuid.UUID, event_type: ListEventType, data: Any = None
    ) -> bool:
        """Send an event to a single connection."""
        connection = self.connections.get(connection_id)
        if connection is None:
            return False
        try:
            connection.send(build_message(list_id, event_type, data))
        except Exception as e:
            logger.error(f"Failed to send {event_type} to connection {connection_id}: {e}")
            return False
        return True

    def deliver(self, list_id: uuid.UUID, message: dict, exclude: str | None = None) -> int:
        """Fan an already-built message out to the list's room."""
        delivered = 0
        for connection_id in self.registry.members(list_id):
            if connection_id == exclude:
                continue
            connection = self.connections.get(connection_id)
            if connection is None:
                continue
            try:
                connection.send(message)
                delivered += 1
            except Exception as e:
                logger.error(f"Failed to deliver {message.get('type')} to {connection_id}: {e}")
        logger.debug(f"Delivered {message.get('type')} for list {list_id} to {delivered} clients")
        return delivered


# Synchronous Redis client for publishing from worker processes
_sync_redis: redis.Redis | None = None


def get_sync_redis() -> redis.Redis:
    """Get synchronous Redis client for publishing from Celery tasks."""
    global _sync_redis
    if _sync_redis is None:
        _sync_redis = redis.from_url(settings.redis_url)
    return _sync_redis


def publish_list_event(list_id: uuid.UUID, event_type: ListEventType, data: Any = None) -> None:
    """Publish an event to a list's Redis channel.

    Used by processes that hold no websocket connections (Celery workers);
    every web process relays the channel to its own clients.

    Args:
        list_id: The list ID to publish to
        event_type: Type of event (ItemRemoved, etc.)
        data: Optional event payload
    """
    try:
        redis_client = get_sync_redis()
        channel = f"{CHANNEL_PREFIX}{list_id}"
        message = build_message(list_id, event_type, data)
        redis_client.publish(channel, json.dumps(message))
        logger.debug(f"Published {event_type} to {channel}")
    except Exception as e:
        # Don't fail the mutation if pub/sub fails
        logger.error(f"Failed to publish list event: {e}")


class RealtimeService:
    """Async Redis pub/sub subscriber that relays list events to local clients."""

    def __init__(self) -> None:
        self._redis: aioredis.Redis | None = None
        self._pubsub: PubSub | None = None

    async def _get_redis(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = aioredis.from_url(settings.redis_url)
        return self._redis

    async def subscribe(self, pattern: str) -> AsyncIterator[dict]:
        """Subscribe to a Redis channel pattern and yield decoded messages."""
        redis_conn = await self._get_redis()
        self._pubsub = redis_conn.pubsub()
        await self._pubsub.psubscribe(pattern)

        try:
            async for message in self._pubsub.listen():
                if message["type"] == "pmessage":
                    try:
                        data = json.loads(message["data"])
                        yield data
                    except json.JSONDecodeError:
                        logger.warning(f"Invalid JSON in pub/sub message: {message['data']}")
        finally:
            if self._pubsub:
                await self._pubsub.punsubscribe(pattern)

    async def relay_to(self, broadcaster: Broadcaster) -> None:
        """Forward every published list event to the local room."""
        async for message in self.subscribe(f"{CHANNEL_PREFIX}*"):
            try:
                list_id = uuid.UUID(str(message.get("list_id")))
            except ValueError:
                logger.warning(f"Dropping relayed event without a valid list_id: {message}")
                continue
            broadcaster.deliver(list_id, message)

    async def cleanup(self) -> None:
        """Clean up Redis connections."""
        if self._pubsub:
            await self._pubsub.close()
        if self._redis:
            await self._redis.close()


async def run_relay(broadcaster: Broadcaster) -> None:
    """Keep a relay subscription alive until cancelled."""
    while True:
        service = RealtimeService()
        try:
            await service.relay_to(broadcaster)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"List event relay failed, retrying in {RELAY_RETRY_SECONDS}s: {e}")
        finally:
            await service.cleanup()
        await asyncio.sleep(RELAY_RETRY_SECONDS)
