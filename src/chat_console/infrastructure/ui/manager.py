"""In-process registry of browser tabs attached to the console."""
from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import WebSocket

from chat_console.infrastructure.ui.protocol import ConsoleOutbound

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks console WebSocket clients and fans view updates out to all of them."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}

    def __len__(self) -> int:
        return len(self._connections)

    async def connect(self, ws: WebSocket) -> str:
        await ws.accept()
        client_id = uuid.uuid4().hex
        self._connections[client_id] = ws
        logger.debug("Console client connected: %s (total=%d)", client_id, len(self._connections))
        return client_id

    def disconnect(self, client_id: str) -> None:
        if self._connections.pop(client_id, None) is not None:
            logger.debug("Console client disconnected: %s", client_id)

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> None:
        """Send a frame to every tab; tabs that fail to receive are dropped."""
        raw = ConsoleOutbound(type=event_type, data=data).model_dump_json()
        dead: list[str] = []
        for client_id, ws in list(self._connections.items()):
            try:
                await ws.send_text(raw)
            except Exception:
                dead.append(client_id)
        for client_id in dead:
            self.disconnect(client_id)

    async def send_to(self, client_id: str, event_type: str, data: dict[str, Any]) -> None:
        ws = self._connections.get(client_id)
        if ws is None:
            return
        try:
            await ws.send_text(ConsoleOutbound(type=event_type, data=data).model_dump_json())
        except Exception:
            self.disconnect(client_id)
