from __future__ import annotations

from pydantic import BaseModel

from chat_console.domain.value_objects.enums import ConnectionState


class ConnectionResponse(BaseModel):
    state: ConnectionState
    attempts: int
    exhausted: bool
