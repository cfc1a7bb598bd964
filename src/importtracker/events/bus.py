"""Notification bus for "projects changed" events.

The bus is owned by whoever owns the store gateway and handed to each
session explicitly. Every subscriber gets its own queue, so a slow or
closed subscriber never affects the others, and there is no cap on the
number of subscribers.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger("importtracker.events")


class EventKind(str, Enum):
    """Kinds of messages carried on the change stream."""

    CONNECTED = "connected"
    PROJECTS_UPDATED = "projects-updated"
    HEARTBEAT = "heartbeat"


@dataclass(frozen=True)
class ChangeEvent:
    """A signal that something changed.

    ``data`` is informative only (a timestamp for updates); receivers
    re-fetch the collection instead of trusting it.
    """

    kind: EventKind
    data: str = ""


class Subscription:
    """One subscriber's view of the bus."""

    def __init__(self, bus: "NotificationBus"):
        self._bus = bus
        self._queue: queue.Queue[Optional[ChangeEvent]] = queue.Queue()
        self.closed = False

    def deliver(self, event: ChangeEvent) -> None:
        if not self.closed:
            self._queue.put(event)

    def get(self, timeout: Optional[float] = None) -> Optional[ChangeEvent]:
        """Wait for the next event.

        Args:
            timeout: Seconds to wait; None blocks until an event arrives

        Returns:
            The next event, or None if the timeout expired first or the
            subscription was closed while waiting
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[ChangeEvent]:
        """Return every queued event without waiting."""
        events = []
        while True:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return events
            if event is not None:
                events.append(event)

    def close(self) -> None:
        """Stop receiving events. Queued events are discarded."""
        if self.closed:
            return
        self.closed = True
        self._bus.unsubscribe(self)
        self.drain()
        # Wake a reader blocked in get()
        self._queue.put(None)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class NotificationBus:
    """Process-wide fan-out of change events."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: list[Subscription] = []

    def subscribe(self) -> Subscription:
        subscription = Subscription(self)
        with self._lock:
            self._subscriptions.append(subscription)
            count = len(self._subscriptions)
        logger.debug(f"Subscriber added ({count} active)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
            count = len(self._subscriptions)
        logger.debug(f"Subscriber removed ({count} active)")

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, event: ChangeEvent) -> int:
        """Deliver an event to every current subscriber.

        Returns:
            Number of subscribers the event was delivered to
        """
        with self._lock:
            targets = list(self._subscriptions)
        for subscription in targets:
            subscription.deliver(event)
        logger.debug(f"Published {event.kind.value} to {len(targets)} subscriber(s)")
        return len(targets)
