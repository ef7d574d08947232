"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from chat_console.services.console import ChatConsole


def get_console(request: Request) -> ChatConsole:
    return request.app.state.console


ConsoleDep = Annotated[ChatConsole, Depends(get_console)]
