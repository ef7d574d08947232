from __future__ import annotations

from fastapi import APIRouter

from chat_console.api.deps import ConsoleDep

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz(console: ConsoleDep) -> dict[str, str]:
    return {"status": "ok", "connection": str(console.connection_state)}
