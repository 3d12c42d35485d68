"""
Per-session notification queues.

Each connected player gets an ``asyncio.Queue`` that a transport (websocket,
SSE) drains. Sending to a player with no session raises
``NotificationDeliveryError`` so the caller can log and move on.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Any

from inventory_server.exceptions import NotificationDeliveryError
from inventory_server.structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_QUEUE_SIZE = 256


class SessionNotifier:
    """Satisfies ``ClientNotifierProtocol`` with one bounded queue per connected player."""

    def __init__(self, max_queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._max_queue_size = max_queue_size
        self._queues: dict[str, asyncio.Queue[dict[str, Any]]] = {}

    def connect(self, player_id: str) -> asyncio.Queue[dict[str, Any]]:
        queue = self._queues.get(player_id)
        if queue is None:
            queue = asyncio.Queue(maxsize=self._max_queue_size)
            self._queues[player_id] = queue
            logger.info("Notification session opened", player_id=player_id)
        return queue

    def disconnect(self, player_id: str) -> None:
        if self._queues.pop(player_id, None) is not None:
            logger.info("Notification session closed", player_id=player_id)

    def is_connected(self, player_id: str) -> bool:
        return player_id in self._queues

    async def send(self, player_id: str, event_type: str, payload: dict[str, Any]) -> None:
        queue = self._queues.get(player_id)
        if queue is None:
            raise NotificationDeliveryError(
                f"Player {player_id} has no open session",
                recipient_id=player_id,
                details={"event_type": event_type},
            )

        event = {
            "event_type": event_type,
            "payload": payload,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        # Blocks while the queue is full; the caller bounds the wait with a timeout.
        await queue.put(event)

    def drain(self, player_id: str) -> list[dict[str, Any]]:
        """Remove and return every queued event for a player."""
        queue = self._queues.get(player_id)
        events: list[dict[str, Any]] = []
        if queue is None:
            return events
        while not queue.empty():
            events.append(queue.get_nowait())
        return events
