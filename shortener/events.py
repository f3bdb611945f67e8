"""Event channel between the shortener core and push transports.

The service publishes events synchronously from whatever thread serves the
request. ``EventChannel.publish`` never blocks and never raises: events are
handed to the asyncio loop that owns the consumer via
``loop.call_soon_threadsafe``. A transport (the WebSocket hub) binds the
channel to its loop and awaits ``get()``.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class EventKind(str, Enum):
    """Event names broadcast to listeners."""

    CREATED = "UrlCreated"
    CLICKED = "UrlClicked"
    DELETED = "UrlDeleted"


@dataclass(frozen=True)
class URLEvent:
    """A single notification about a short URL."""

    kind: EventKind
    data: Dict[str, Any] = field(default_factory=dict)

    def to_message(self) -> Dict[str, Any]:
        """Wire form sent to listeners."""
        return {"event": self.kind.value, "data": self.data}


class EventChannel:
    """Thread-safe, fire-and-forget queue of URL events."""

    def __init__(self, maxsize: int = 1000, logger: Optional[logging.Logger] = None):
        """Initialize event channel.

        Args:
            maxsize: Maximum queued events before new ones are dropped
            logger: Optional logger
        """
        self.maxsize = maxsize
        self.logger = logger or logging.getLogger(__name__)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._queue: Optional[asyncio.Queue] = None
        self.published = 0
        self.dropped = 0

    @property
    def bound(self) -> bool:
        return self._loop is not None

    def bind(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Attach the channel to the event loop of its consumer.

        Must be called from inside that loop when ``loop`` is omitted.
        """
        self._loop = loop or asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=self.maxsize)
        self.logger.debug("Event channel bound to event loop")

    def unbind(self) -> None:
        """Detach from the consumer loop; later events are dropped."""
        self._loop = None
        self._queue = None

    def publish(self, event: URLEvent) -> None:
        """Queue an event for delivery without blocking the caller."""
        loop, queue = self._loop, self._queue
        if loop is None or queue is None:
            self.logger.debug(f"No event consumer bound, dropping {event.kind.value}")
            return
        try:
            loop.call_soon_threadsafe(self._enqueue, queue, event)
        except Exception as e:
            # Closed loop or similar; the originating request must not fail
            self.dropped += 1
            self.logger.warning(f"Failed to publish {event.kind.value} event: {e}")

    def _enqueue(self, queue: asyncio.Queue, event: URLEvent) -> None:
        try:
            queue.put_nowait(event)
            self.published += 1
        except asyncio.QueueFull:
            self.dropped += 1
            self.logger.warning(f"Event queue full, dropping {event.kind.value}")

    async def get(self) -> URLEvent:
        """Wait for the next event. Only valid on the bound loop."""
        if self._queue is None:
            raise RuntimeError("Event channel is not bound to an event loop")
        return await self._queue.get()


def url_created(result) -> URLEvent:
    return URLEvent(EventKind.CREATED, result.to_dict())


def url_clicked(short_code: str, click_count: int, long_url: str, long_url_click_count: int) -> URLEvent:
    return URLEvent(
        EventKind.CLICKED,
        {
            "short_code": short_code,
            "click_count": click_count,
            "long_url": long_url,
            "long_url_click_count": long_url_click_count,
        },
    )


def url_deleted(short_code: str) -> URLEvent:
    return URLEvent(EventKind.DELETED, {"short_code": short_code})
