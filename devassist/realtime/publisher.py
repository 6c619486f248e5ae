"""
Result publishing for real-time consumers.

The pipeline never talks to a transport directly. It publishes one message
per processed event; transports (WebSocket, Socket.IO, a terminal view)
subscribe and forward.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class ResultPublisher(ABC):
    """Sink for pipeline messages."""

    @abstractmethod
    async def publish(self, message: Dict[str, Any]) -> None:
        pass


class QueuePublisher(ResultPublisher):
    """
    Fan-out publisher backed by one bounded asyncio.Queue per subscriber.

    A slow subscriber never blocks the pipeline: when its queue is full the
    oldest message is dropped to make room.
    """

    def __init__(self, max_size: int = 100):
        self.max_size = max_size
        self._subscribers: List[asyncio.Queue] = []

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_size)
        self._subscribers.append(queue)
        logger.debug(f"Subscriber added ({len(self._subscribers)} total)")
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)
            logger.debug(f"Subscriber removed ({len(self._subscribers)} total)")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def publish(self, message: Dict[str, Any]) -> None:
        for queue in list(self._subscribers):
            if queue.full():
                queue.get_nowait()
                logger.warning("Subscriber queue full, dropped oldest message")
            queue.put_nowait(message)
