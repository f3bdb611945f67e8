"""WebSocket hub broadcasting short URL events to connected listeners.

Listeners connect to ``/hubs/urls`` and receive JSON messages of the form
``{"event": "UrlCreated" | "UrlClicked" | "UrlDeleted", "data": {...}}``.
The hub never sends anything back to the service: delivery failures are
logged and the failing listener is dropped.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from shortener.events import EventChannel


class ConnectionHub:
    """Tracks WebSocket listeners and fans out events from the channel."""

    def __init__(self, channel: EventChannel, logger: Optional[logging.Logger] = None):
        """Initialize hub.

        Args:
            channel: Event channel to drain
            logger: Optional logger
        """
        self.channel = channel
        self.logger = logger or logging.getLogger(__name__)
        self.connections: Set[WebSocket] = set()
        self.lock = asyncio.Lock()
        self.broadcast_task: Optional[asyncio.Task] = None

    @property
    def listener_count(self) -> int:
        return len(self.connections)

    async def start(self) -> None:
        """Bind the channel to the running loop and start broadcasting."""
        if self.broadcast_task is not None:
            return
        self.channel.bind()
        self.broadcast_task = asyncio.create_task(self._run())
        self.logger.info("Event hub started")

    async def stop(self) -> None:
        """Stop broadcasting and close every listener."""
        self.channel.unbind()
        if self.broadcast_task is not None:
            self.broadcast_task.cancel()
            try:
                await self.broadcast_task
            except asyncio.CancelledError:
                pass
            self.broadcast_task = None

        async with self.lock:
            connections = list(self.connections)
            self.connections.clear()
        for websocket in connections:
            try:
                await websocket.close()
            except Exception as e:
                self.logger.debug(f"Error closing listener: {e}")
        self.logger.info("Event hub stopped")

    async def connect(self, websocket: WebSocket) -> None:
        """Register and accept a listener."""
        async with self.lock:
            self.connections.add(websocket)
        await websocket.accept()
        self.logger.info(f"Listener connected ({self.listener_count} total)")

    async def disconnect(self, websocket: WebSocket) -> None:
        """Forget a listener."""
        async with self.lock:
            self.connections.discard(websocket)
        self.logger.info(f"Listener disconnected ({self.listener_count} total)")

    async def broadcast(self, message: Dict[str, Any]) -> None:
        """Send a message to every connected listener."""
        async with self.lock:
            connections = list(self.connections)

        failed = []
        for websocket in connections:
            if websocket.application_state != WebSocketState.CONNECTED:
                continue
            try:
                await websocket.send_json(message)
            except Exception as e:
                self.logger.warning(f"Failed to send {message.get('event')} to listener: {e}")
                failed.append(websocket)

        if failed:
            async with self.lock:
                for websocket in failed:
                    self.connections.discard(websocket)

    async def _run(self) -> None:
        while True:
            event = await self.channel.get()
            try:
                await self.broadcast(event.to_message())
            except Exception as e:
                self.logger.error(f"Error broadcasting {event.kind.value}: {e}")


router = APIRouter()


@router.websocket("/hubs/urls")
async def url_events(websocket: WebSocket):
    """Stream short URL events to a listener until it disconnects."""
    hub: ConnectionHub = websocket.app.state.hub
    await hub.connect(websocket)
    try:
        while True:
            # Listeners have nothing to say; reading detects disconnects
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await hub.disconnect(websocket)
