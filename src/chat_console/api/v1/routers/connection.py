from __future__ import annotations

from fastapi import APIRouter

from chat_console.api.deps import ConsoleDep
from chat_console.api.v1.schemas.connection import ConnectionResponse
from chat_console.services.console import ChatConsole

router = APIRouter(prefix="/api/v1/console/connection", tags=["connection"])


def _describe(console: ChatConsole) -> ConnectionResponse:
    transport = console.transport
    return ConnectionResponse(
        state=transport.state,
        attempts=transport.attempts,
        exhausted=transport.exhausted,
    )


@router.get("", response_model=ConnectionResponse)
async def get_connection(console: ConsoleDep) -> ConnectionResponse:
    return _describe(console)


@router.post("/reconnect", response_model=ConnectionResponse)
async def reconnect(console: ConsoleDep) -> ConnectionResponse:
    await console.reconnect()
    return _describe(console)
