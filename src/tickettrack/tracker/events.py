"""Event manager for state snapshots (in-process listeners and SSE subscribers)."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Types of events that can be emitted."""

    STATE_CHANGED = "state_changed"
    AUTHENTICATION_SUCCEEDED = "authentication_succeeded"
    HEARTBEAT = "heartbeat"


@dataclass
class Event:
    """An event delivered to listeners and SSE subscribers."""

    event_type: EventType
    data: dict[str, Any]

    def to_sse(self) -> str:
        """Convert to SSE format."""
        return f"event: {self.event_type.value}\ndata: {json.dumps(self.data)}\n\n"


@dataclass
class Subscriber:
    """A queue subscriber to the event stream, bound to one event loop."""

    id: str
    queue: asyncio.Queue[Event]
    loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def create(cls) -> Subscriber:
        """Create a new subscriber bound to the running loop, if any."""
        try:
            loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        return cls(id=str(uuid4()), queue=asyncio.Queue(), loop=loop)

    def deliver(self, event: Event) -> None:
        """Put an event on the queue from any thread."""
        if self.loop is None or self.loop.is_closed():
            self.queue.put_nowait(event)
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self.loop:
            self.queue.put_nowait(event)
        else:
            self.loop.call_soon_threadsafe(self.queue.put_nowait, event)


Listener = Callable[[Event], None]


@dataclass
class EventManager:
    """Publishes events to listeners and SSE subscribers.

    Emitting is safe from any thread: the tick clock and the network executor
    both publish snapshots.
    """

    _subscribers: dict[str, Subscriber] = field(default_factory=dict)
    _listeners: list[Listener] = field(default_factory=list)
    _heartbeat_interval: int = 30  # seconds
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def subscribe(self) -> Subscriber:
        """Subscribe a client (e.g. an SSE stream) to events."""
        subscriber = Subscriber.create()
        with self._lock:
            self._subscribers[subscriber.id] = subscriber
        return subscriber

    def unsubscribe(self, subscriber_id: str) -> None:
        """Unsubscribe a client. Unknown ids are ignored."""
        with self._lock:
            self._subscribers.pop(subscriber_id, None)

    def add_listener(self, listener: Listener) -> None:
        """Register a synchronous observer, called with every event."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        """Remove an observer. Unknown listeners are ignored."""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    @property
    def subscriber_count(self) -> int:
        """Get the number of active subscribers."""
        return len(self._subscribers)

    def emit(self, event: Event) -> None:
        """Deliver an event to every listener and subscriber.

        A listener that raises is logged and skipped.
        """
        with self._lock:
            listeners = list(self._listeners)
            subscribers = list(self._subscribers.values())

        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener failed for %s", event.event_type.value)

        for subscriber in subscribers:
            subscriber.deliver(event)

    def emit_state(self, snapshot: dict[str, Any]) -> None:
        """Emit a state_changed event carrying a snapshot."""
        self.emit(Event(event_type=EventType.STATE_CHANGED, data=snapshot))

    def emit_authentication_succeeded(self) -> None:
        """Emit an authentication_succeeded event."""
        self.emit(Event(event_type=EventType.AUTHENTICATION_SUCCEEDED, data={}))

    def create_heartbeat_event(self) -> Event:
        """Create a heartbeat event."""
        return Event(
            event_type=EventType.HEARTBEAT,
            data={"timestamp": datetime.now(UTC).isoformat()},
        )
