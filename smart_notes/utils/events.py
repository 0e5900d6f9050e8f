"""In-process Server-Sent Events fan-out per user."""

import asyncio
import logging
from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


def format_event(event_name: str, data: str) -> str:
    """Encode one SSE message."""
    return f"event: {event_name}\ndata: {data}\n\n"


class EventManager:
    """Simple manager for Server-Sent Events (SSE)."""

    def __init__(self):
        # Maps user_id to a set of queues (one per connection)
        self.user_queues: dict[int, set[asyncio.Queue[str]]] = {}

    def connection_count(self, user_id: int) -> int:
        """Number of open streams for a user."""
        return len(self.user_queues.get(user_id, ()))

    async def subscribe(self, user_id: int) -> AsyncIterator[str]:
        """Stream events for a specific user until the client disconnects."""
        queue: asyncio.Queue[str] = asyncio.Queue()
        self.user_queues.setdefault(user_id, set()).add(queue)
        logger.info(
            f"[SSE] User {user_id} subscribed. Active connections: {self.connection_count(user_id)}"
        )

        try:
            # Initial comment confirms the connection
            yield ": ping\n\n"
            while True:
                yield await queue.get()
        finally:
            queues = self.user_queues.get(user_id)
            if queues is not None:
                queues.discard(queue)
                if not queues:
                    del self.user_queues[user_id]
            logger.info(f"[SSE] User {user_id} unsubscribed.")

    async def broadcast(self, user_id: int, event_name: str, data: str) -> int:
        """
        Send an event to every open stream of a user.

        Returns:
            Number of streams the event was queued on
        """
        queues = self.user_queues.get(user_id)
        if not queues:
            logger.debug(f"[SSE] No active connections for user {user_id} to broadcast '{event_name}'")
            return 0

        logger.info(
            f"[SSE] Broadcasting '{event_name}' to user {user_id} ({len(queues)} connections)"
        )
        message = format_event(event_name, data)
        for queue in queues:
            await queue.put(message)
        return len(queues)


event_manager = EventManager()
