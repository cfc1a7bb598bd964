"""Server-sent-events framing for the change stream.

Server side, ``ChangeStream`` turns a bus subscription into text frames:
``connected`` once, one ``projects-updated`` per successful write, and a
comment frame as heartbeat whenever the channel has been idle for
``heartbeat_interval`` seconds. Client side, ``read_events`` turns frames
back into ChangeEvents.
"""

from typing import Iterable, Iterator

from importtracker.domain.errors import StreamInterruptedError
from importtracker.events.bus import ChangeEvent, EventKind, NotificationBus

HEARTBEAT_INTERVAL = 15.0
HEARTBEAT_FRAME = ": ping\n\n"


def encode_event(event: ChangeEvent) -> str:
    """Render an event as an SSE frame."""
    if event.kind == EventKind.HEARTBEAT:
        return HEARTBEAT_FRAME
    return f"event: {event.kind.value}\ndata: {event.data}\n\n"


def decode_frame(frame: str) -> ChangeEvent:
    """Parse one SSE frame (without its blank-line terminator).

    Frames made only of comment lines are heartbeats.
    """
    kind = None
    data_lines = []
    for line in frame.splitlines():
        if not line or line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        value = value[1:] if value.startswith(" ") else value
        if name == "event":
            kind = value
        elif name == "data":
            data_lines.append(value)
    if kind is None:
        return ChangeEvent(EventKind.HEARTBEAT)
    try:
        return ChangeEvent(EventKind(kind), "\n".join(data_lines))
    except ValueError:
        raise StreamInterruptedError(f"Unknown event '{kind}' on change stream")


class ChangeStream:
    """Frames for one connected client.

    Iterating blocks between events; ``close`` (or leaving the ``with``
    block) releases the bus subscription without affecting other clients.
    """

    def __init__(self, bus: NotificationBus, heartbeat_interval: float = HEARTBEAT_INTERVAL):
        self.heartbeat_interval = heartbeat_interval
        self.subscription = bus.subscribe()

    def __iter__(self) -> Iterator[str]:
        yield encode_event(ChangeEvent(EventKind.CONNECTED, "ok"))
        while not self.subscription.closed:
            event = self.subscription.get(timeout=self.heartbeat_interval)
            if self.subscription.closed:
                return
            if event is None:
                yield HEARTBEAT_FRAME
            else:
                yield encode_event(event)

    def close(self) -> None:
        self.subscription.close()

    def __enter__(self) -> "ChangeStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def read_events(chunks: Iterable[str]) -> Iterator[ChangeEvent]:
    """Decode a stream of text chunks into events.

    Chunks may split or join frames arbitrarily.

    Raises:
        StreamInterruptedError: If the transport fails or the stream ends
            while the client is still reading
    """
    buffer = ""
    try:
        for chunk in chunks:
            buffer += chunk.replace("\r\n", "\n")
            while "\n\n" in buffer:
                frame, buffer = buffer.split("\n\n", 1)
                yield decode_frame(frame)
    except (OSError, EOFError) as e:
        raise StreamInterruptedError(f"Change stream dropped: {e}") from e
    raise StreamInterruptedError("Change stream closed by the server")
