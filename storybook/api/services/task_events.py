"""
Change feed for background tasks.

The task repository publishes ``pg_notify`` messages on the
``book_generation_tasks`` channel. A single listener connection per API
process fans them out to the WebSocket subscribers of the task's owner.
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import asyncpg

from ..config import TASK_EVENTS_CHANNEL

logger = logging.getLogger(__name__)


class TaskEventBroker:
    """Relay task change notifications to per-user queues."""

    def __init__(self):
        self._subscribers: dict[str, set[asyncio.Queue]] = {}
        self._conn: Optional[asyncpg.Connection] = None

    async def start(self, dsn: str) -> None:
        """Open the listener connection. Called during API startup."""
        self._conn = await asyncpg.connect(dsn)
        await self._conn.add_listener(TASK_EVENTS_CHANNEL, self._on_notify)
        logger.info(f"Listening for task events on {TASK_EVENTS_CHANNEL}")

    async def stop(self) -> None:
        if self._conn is not None:
            await self._conn.remove_listener(TASK_EVENTS_CHANNEL, self._on_notify)
            await self._conn.close()
            self._conn = None

    def _on_notify(self, connection, pid, channel: str, payload: str) -> None:
        try:
            event = json.loads(payload)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring malformed task event: {payload[:100]}")
            return
        self.publish(event)

    def publish(self, event: dict) -> None:
        """Deliver an event to every subscriber of its user."""
        for queue in self._subscribers.get(event.get("user_id"), ()):
            queue.put_nowait(event)

    @asynccontextmanager
    async def subscribe(self, user_id: str) -> AsyncIterator[asyncio.Queue]:
        """Receive the user's task events for the duration of the block."""
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.setdefault(user_id, set()).add(queue)
        try:
            yield queue
        finally:
            queues = self._subscribers.get(user_id)
            if queues is not None:
                queues.discard(queue)
                if not queues:
                    del self._subscribers[user_id]

    def subscriber_count(self, user_id: str) -> int:
        return len(self._subscribers.get(user_id, ()))


# Global broker instance (started during API startup)
task_event_broker = TaskEventBroker()
