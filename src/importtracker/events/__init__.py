"""Change notification for importtracker."""

from importtracker.events.bus import ChangeEvent, EventKind, NotificationBus, Subscription
from importtracker.events.stream import ChangeStream, read_events

__all__ = [
    "ChangeEvent",
    "EventKind",
    "NotificationBus",
    "Subscription",
    "ChangeStream",
    "read_events",
]
