import asyncio
import logging
import threading
from typing import List, Optional

from fuel_telemetry.config import settings
from fuel_telemetry.schemas.fuel_event import FuelLevelEvent

logger = logging.getLogger(__name__)


# Queued on close so a waiting consumer wakes up
_CLOSED = object()


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Subscription:
    """
    A live feed of events published after the subscription was opened.

    Iterate it with `async for`, or poll it with `get_nowait()`. Closing
    stops delivery immediately, ends any pending `get()` or `async for`
    and leaves other subscribers untouched.
    """

    def __init__(self, broadcaster: "FuelLevelBroadcaster", max_queue: int):
        self._broadcaster = broadcaster
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue)
        self._loop = _running_loop()
        self.dropped = 0
        self.closed = False

    def _call_in_loop(self, callback, *args) -> None:
        loop = self._loop
        if loop is None or loop is _running_loop():
            callback(*args)
        elif not loop.is_closed():
            loop.call_soon_threadsafe(callback, *args)

    def _offer(self, event: FuelLevelEvent) -> None:
        if self.closed:
            return
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            # Slow consumer: drop for this subscriber only
            self.dropped += 1
            logger.warning(f"Subscriber queue full, dropped event for tank {event.data.tank_id}")

    def _wake(self) -> None:
        # Undelivered events are discarded; the marker always fits
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)

    def deliver(self, event: FuelLevelEvent) -> None:
        """Hand an event to this subscriber without blocking the caller."""
        self._call_in_loop(self._offer, event)

    def shutdown(self) -> None:
        """Stop delivery and release anyone waiting. Called by the broadcaster."""
        if self.closed:
            return
        self.closed = True
        self._call_in_loop(self._wake)

    async def get(self, timeout: Optional[float] = None) -> Optional[FuelLevelEvent]:
        """Wait for the next event. Returns None on timeout or once closed."""
        if self.closed and self._queue.empty():
            return None
        try:
            event = await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None
        return None if event is _CLOSED else event

    def get_nowait(self) -> Optional[FuelLevelEvent]:
        try:
            event = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
        return None if event is _CLOSED else event

    def pending(self) -> int:
        return 0 if self.closed else self._queue.qsize()

    def close(self) -> None:
        self._broadcaster.unsubscribe(self)

    def __aiter__(self):
        return self

    async def __anext__(self) -> FuelLevelEvent:
        event = await self.get()
        if event is None:
            raise StopAsyncIteration
        return event

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class FuelLevelBroadcaster:
    """
    In-process multicast of fuel level events.

    Every subscriber gets its own bounded queue. Publishing never waits on
    consumers and there is no replay: a new subscriber only sees events
    published after it subscribed.
    """

    def __init__(self, max_queue: int = 100):
        self._max_queue = max_queue
        self._subs: List[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, self._max_queue)
        with self._lock:
            self._subs.append(subscription)
        logger.debug(f"Subscriber added ({self.subscriber_count} active)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subs:
                self._subs.remove(subscription)
        subscription.shutdown()
        logger.debug(f"Subscriber removed ({self.subscriber_count} active)")

    def publish(self, event: FuelLevelEvent) -> int:
        """Deliver `event` to every current subscriber. Returns how many received it."""
        with self._lock:
            subscribers = list(self._subs)
        for subscription in subscribers:
            subscription.deliver(event)
        return len(subscribers)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subs)


fuel_level_broadcaster = FuelLevelBroadcaster(max_queue=settings.event_queue_size)


def get_broadcaster() -> FuelLevelBroadcaster:
    return fuel_level_broadcaster
