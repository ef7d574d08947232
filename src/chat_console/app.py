from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_console.api.middleware.request_log import RequestLogMiddleware
from chat_console.api.v1.routers import connection, conversations, health, messages, ws
from chat_console.application.exceptions import (
    AuthError,
    FetchError,
    NotFoundError,
    ParseError,
    TransportError,
    ValidationError,
)
from chat_console.config import settings
from chat_console.infrastructure.rest.client import HttpConversationApi
from chat_console.infrastructure.transport.session import TransportSession
from chat_console.infrastructure.ui.notifier import BroadcastNotifier
from chat_console.infrastructure.ui.renderer import BroadcastRenderer
from chat_console.services.console import ChatConsole

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    manager = ws.get_manager()
    renderer = BroadcastRenderer(manager)
    http = httpx.AsyncClient(
        base_url=settings.BACKEND_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )
    transport = TransportSession(
        settings.socket_url,
        socketio_path=settings.SOCKETIO_PATH,
        max_reconnect_attempts=settings.RECONNECT_ATTEMPTS,
        reconnect_delay=settings.RECONNECT_DELAY_SECONDS,
        connect_timeout=settings.SOCKET_CONNECT_TIMEOUT_SECONDS,
        status_listener=renderer.render_connection_status,
    )
    console = ChatConsole(
        HttpConversationApi(http),
        transport,
        renderer,
        BroadcastNotifier(manager, sound=settings.NOTIFY_SOUND),
        reload_suppress_seconds=settings.RELOAD_SUPPRESS_SECONDS,
        preview_chars=settings.NOTIFICATION_PREVIEW_CHARS,
    )
    app.state.console = console
    logger.info("Console backend: %s (socket %s)", settings.BACKEND_URL, settings.socket_url)

    await console.start()

    yield

    await console.stop()
    await http.aclose()
    logger.info("Console stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Lead Chat Console",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLogMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(connection.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(AuthError)
    async def _auth(_req: Request, exc: AuthError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"detail": exc.detail})

    @app.exception_handler(FetchError)
    async def _fetch(_req: Request, exc: FetchError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": exc.detail})

    @app.exception_handler(ParseError)
    async def _parse(_req: Request, exc: ParseError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": exc.detail})

    @app.exception_handler(TransportError)
    async def _transport(_req: Request, exc: TransportError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": exc.detail})
