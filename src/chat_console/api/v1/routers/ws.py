from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from chat_console.application.exceptions import ConsoleError
from chat_console.config import settings
from chat_console.infrastructure.ui.manager import ConnectionManager
from chat_console.infrastructure.ui.protocol import (
    ConsoleInbound,
    ConsoleOutbound,
    message_to_wire,
    state_to_wire,
)
from chat_console.services.console import ChatConsole

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

manager = ConnectionManager()


def get_manager() -> ConnectionManager:
    return manager


@router.websocket("/ws/console")
async def ws_console(websocket: WebSocket) -> None:
    console: ChatConsole = websocket.app.state.console
    client_id = await manager.connect(websocket)

    heartbeat_task = asyncio.create_task(
        _heartbeat(websocket), name=f"ws-heartbeat-{client_id}",
    )
    try:
        await _send_initial(websocket, console)
        await _read_loop(websocket, console)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", client_id)
    finally:
        heartbeat_task.cancel()
        manager.disconnect(client_id)


async def _send(ws: WebSocket, event_type: str, data: dict[str, Any]) -> None:
    await ws.send_text(ConsoleOutbound(type=event_type, data=data).model_dump_json())


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await _send(ws, "pong", {})
    except asyncio.CancelledError:
        pass
    except Exception:
        pass


async def _send_initial(ws: WebSocket, console: ChatConsole) -> None:
    # A freshly opened tab gets the current picture before any live frames.
    await _send(ws, "connection.status", {"status": str(console.connection_state)})
    await _send(
        ws,
        "conversations.listed",
        {"conversations": [state_to_wire(s) for s in console.conversations()]},
    )
    snapshot = console.thread()
    if snapshot.conversation_id is not None:
        await _send(
            ws,
            "thread.rendered",
            {
                "conversation_id": snapshot.conversation_id,
                "messages": [message_to_wire(m) for m in snapshot.messages],
            },
        )


async def _read_loop(ws: WebSocket, console: ChatConsole) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = ConsoleInbound.model_validate_json(raw)
        except PydanticValidationError:
            await _send(ws, "error", {"code": "invalid_payload"})
            continue

        try:
            if msg.type == "ping":
                await _send(ws, "pong", {})

            elif msg.type == "select":
                conversation_id = msg.data.get("conversation_id")
                if not conversation_id:
                    await _send(ws, "error", {"code": "invalid_data", "detail": "conversation_id is required"})
                    continue
                await console.select(str(conversation_id))

            elif msg.type == "send":
                await console.send(str(msg.data.get("content") or ""))

            elif msg.type == "reconnect":
                await console.reconnect()

            else:
                await _send(ws, "error", {"code": "unknown_type", "type": msg.type})
        except ConsoleError as exc:
            # The renderer has already broadcast the user-facing notice.
            logger.debug("WS %s failed: %s", msg.type, exc.detail)
