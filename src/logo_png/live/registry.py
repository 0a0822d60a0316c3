"""Subscriber registry — the dynamic set of connected live viewers.

Learn: Each viewer is an Outbox (an in-memory queue of PNG frames) under an
integer id. Ids come from a process-wide counter starting at 1 and are
never handed out twice, so a viewer that drops and reconnects is always a
new subscriber.

for_each() copies the membership under the lock and visits outside it:
viewers may join or leave mid-broadcast without breaking the iteration,
and a viewer that joins mid-broadcast may or may not get that frame.
"""

import asyncio
import itertools
import threading
from collections.abc import Callable
from typing import NamedTuple, Optional


class SendError(Exception):
    """A frame could not be queued for one subscriber."""


class Outbox:
    """Outbound frame queue for one subscriber.

    max_size=0 means unbounded. With a bound, an enqueue that would exceed
    it closes the outbox and raises SendError; the connection handler sees
    the closed outbox and disconnects the viewer.
    """

    def __init__(self, max_size: int = 0):
        self._queue: asyncio.Queue[Optional[bytes]] = asyncio.Queue()
        self._max_size = max_size
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def pending(self) -> int:
        return self._queue.qsize()

    def send_nowait(self, payload: bytes) -> None:
        if self._closed:
            raise SendError("outbox closed")
        if self._max_size and self._queue.qsize() >= self._max_size:
            self.close()
            raise SendError(f"outbox overflow ({self._max_size} frames pending)")
        self._queue.put_nowait(payload)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            # Wake a reader blocked in get()
            self._queue.put_nowait(None)

    async def get(self) -> Optional[bytes]:
        """Next frame, or None once the outbox is closed."""
        if self._closed:
            return None
        return await self._queue.get()


class Subscriber(NamedTuple):
    id: int
    outbox: Outbox


class SubscriberRegistry:
    """Thread-safe id -> Outbox map with never-reused ids."""

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subscribers: dict[int, Subscriber] = {}

    def register(self, outbox: Outbox) -> int:
        with self._lock:
            subscriber_id = next(self._ids)
            self._subscribers[subscriber_id] = Subscriber(subscriber_id, outbox)
        return subscriber_id

    def unregister(self, subscriber_id: int) -> bool:
        """Remove a subscriber. Unknown or already-removed ids are a no-op."""
        with self._lock:
            return self._subscribers.pop(subscriber_id, None) is not None

    def for_each(self, visit: Callable[[Subscriber], None]) -> None:
        with self._lock:
            members = list(self._subscribers.values())
        for subscriber in members:
            visit(subscriber)

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def __contains__(self, subscriber_id: int) -> bool:
        with self._lock:
            return subscriber_id in self._subscribers
