"""
WebSocket Manager - Pushes graph frames to connected viewers.

While the frame loop runs, the graph changes on every tick, so viewers receive
a stream of `graph_updated` messages. Each message carries a sequence number;
a viewer that sees a gap knows frames were coalesced and can keep drawing the
latest state.
"""
from fastapi import WebSocket
from typing import Set
import asyncio
import json
import logging

logger = logging.getLogger(__name__)


class WebSocketManager:
    """
    Tracks viewer connections and fans out graph frames.

    Sends happen outside the connection lock so one slow viewer does not keep
    others from connecting or leaving.
    """

    def __init__(self):
        self._connections: Set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._sequence = 0

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    @property
    def sequence(self) -> int:
        """Sequence number of the last broadcast message."""
        return self._sequence

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        async with self._lock:
            self._connections.add(websocket)
        logger.info("Viewer connected (%d total)", len(self._connections))

    async def disconnect(self, websocket: WebSocket):
        async with self._lock:
            self._connections.discard(websocket)
        logger.info("Viewer disconnected (%d total)", len(self._connections))

    async def broadcast(self, message: dict) -> int:
        """
        Stamp `message` with the next sequence number and send it to every viewer.

        Viewers whose send fails are dropped.

        Returns:
            Number of viewers that received the message
        """
        async with self._lock:
            viewers = list(self._connections)
        if not viewers:
            return 0

        self._sequence += 1
        text = json.dumps({**message, "seq": self._sequence})

        dropped = []
        for websocket in viewers:
            try:
                await websocket.send_text(text)
            except Exception as e:
                logger.debug("Dropping viewer after failed send: %s", e)
                dropped.append(websocket)

        if dropped:
            async with self._lock:
                self._connections.difference_update(dropped)
        return len(viewers) - len(dropped)

    async def notify_graph_updated(self, state: dict | None = None) -> int:
        """Send a `graph_updated` frame, with the full state when given."""
        message = {"type": "graph_updated"}
        if state is not None:
            message["state"] = state
        return await self.broadcast(message)

    async def close_all(self):
        """Close every viewer connection on shutdown."""
        async with self._lock:
            viewers = list(self._connections)
            self._connections.clear()
        for websocket in viewers:
            try:
                await websocket.close()
            except Exception as e:
                logger.debug("Viewer already gone on close: %s", e)
