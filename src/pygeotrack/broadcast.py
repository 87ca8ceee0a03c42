"""Outbound fan-out to subscribers.

Publishing never blocks: each subscriber owns a bounded queue and, when it
is full, the oldest pending frame is discarded to make room. A connection
handler drains the queue at its own pace.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging

from pygeotrack.models import OutboundMessage

_logger = logging.getLogger(__name__)

_subscriber_ids = itertools.count(1)


def encode_message(message: OutboundMessage) -> str:
    return json.dumps(message.to_wire(), separators=(",", ":"))


class Subscriber:
    """One outbound queue of encoded JSON frames."""

    def __init__(self, queue_size: int) -> None:
        self.id = next(_subscriber_ids)
        self.dropped = 0
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)

    def offer(self, frame: str) -> None:
        """Enqueue *frame*, discarding the oldest pending frame when full."""
        if self._queue.full():
            self._queue.get_nowait()
            self.dropped += 1
            if self.dropped == 1 or self.dropped % 100 == 0:
                _logger.warning("Subscriber %d is slow; %d frames dropped", self.id, self.dropped)
        self._queue.put_nowait(frame)

    async def next_frame(self) -> str:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()


class SubscriberRegistry:
    """Set of live subscribers sharing every published message."""

    def __init__(self, queue_size: int = 64) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[int, Subscriber] = {}

    def __len__(self) -> int:
        return len(self._subscribers)

    def register(self) -> Subscriber:
        subscriber = Subscriber(self._queue_size)
        self._subscribers[subscriber.id] = subscriber
        _logger.debug("Subscriber %d registered (%d total)", subscriber.id, len(self._subscribers))
        return subscriber

    def unregister(self, subscriber: Subscriber) -> None:
        if self._subscribers.pop(subscriber.id, None) is not None:
            _logger.debug("Subscriber %d unregistered (%d dropped frames)", subscriber.id, subscriber.dropped)

    def publish(self, message: OutboundMessage) -> int:
        """Encode *message* once and offer it to every subscriber.

        Returns
        -------
        int
            Number of subscribers the frame was offered to.
        """
        if not self._subscribers:
            return 0
        frame = encode_message(message)
        for subscriber in list(self._subscribers.values()):
            subscriber.offer(frame)
        return len(self._subscribers)
