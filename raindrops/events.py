#
# PURPOSE:
# Fan-out of content-free "something changed" signals to every open
# /events stream. A signal carries no payload: each browser simply re-reads
# the listing when it arrives.
#
# LOGIC:
# - subscribe(): async generator, one per connection, registered under a
#   uuid4 together with the event loop that consumes it.
# - signal(): loop-safe delivery from any thread (request handlers on the
#   event loop, or the operator console on its own thread).
# - Leaving the generator for any reason (disconnect, cancellation, error)
#   removes the subscriber.
#

import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeSignal:
    """One "changed" notification as seen by a single subscriber."""
    subscriber_id: str


@dataclass
class _Subscriber:
    queue: asyncio.Queue
    loop: asyncio.AbstractEventLoop


class ChangeBus:
    """
    Registry of live subscribers keyed by id.

    Guarantees:
    1. Every subscriber registered when signal() runs is sent the signal.
    2. Register, unregister and broadcast never race (single lock).
    3. Subscribers whose event loop is gone are dropped on the next signal.
    """

    def __init__(self):
        self._subscribers: Dict[str, _Subscriber] = {}
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    async def subscribe(self) -> AsyncIterator[ChangeSignal]:
        """
        Async generator yielding one ChangeSignal per broadcast.
        Captures the running loop so signal() can be called from any thread.
        """
        subscriber_id = str(uuid.uuid4())
        subscriber = _Subscriber(queue=asyncio.Queue(), loop=asyncio.get_running_loop())

        with self._lock:
            self._subscribers[subscriber_id] = subscriber
        logger.debug(f"[Events] Subscriber {subscriber_id} connected")

        try:
            while True:
                await subscriber.queue.get()
                yield ChangeSignal(subscriber_id=subscriber_id)
        finally:
            self._remove(subscriber_id)

    def signal(self) -> int:
        """
        Push one change signal to every current subscriber.

        Fire-and-forget: returns the number of subscribers it was handed to.
        """
        with self._lock:
            subscribers = list(self._subscribers.items())

        delivered = 0
        for subscriber_id, subscriber in subscribers:
            try:
                subscriber.loop.call_soon_threadsafe(subscriber.queue.put_nowait, None)
                delivered += 1
            except RuntimeError:
                # Loop closed: the connection can no longer be served.
                self._remove(subscriber_id)
        logger.debug(f"[Events] Change signalled to {delivered} subscriber(s)")
        return delivered

    def _remove(self, subscriber_id: str) -> None:
        with self._lock:
            removed = self._subscribers.pop(subscriber_id, None)
        if removed is not None:
            logger.debug(f"[Events] Subscriber {subscriber_id} disconnected")


# --- Module-Level Singleton ---

_bus: Optional[ChangeBus] = None


def get_change_bus() -> ChangeBus:
    global _bus
    if _bus is None:
        _bus = ChangeBus()
    return _bus
