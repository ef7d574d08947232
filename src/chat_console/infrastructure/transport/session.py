"""Socket.IO session to the console backend, with a bounded reconnect loop."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError
from socketio.exceptions import SocketIOError

from chat_console.application.exceptions import ParseError
from chat_console.application.ports.transport import ActiveConversation, InboundHandler
from chat_console.domain.value_objects.enums import ConnectionState, ConnectionStatus
from chat_console.infrastructure.transport.protocol import EVENT_MODELS, parse_event

logger = logging.getLogger(__name__)

StatusListener = Callable[[ConnectionStatus], Awaitable[None]]
Sleep = Callable[[float], Awaitable[None]]

JOIN_EVENT = "join_conversation"

# What a failed dial can raise: handshake refusals, socket errors, timeouts.
_DIAL_ERRORS = (SocketConnectionError, OSError, asyncio.TimeoutError)


class TransportSession:
    """Owns the single persistent connection and its ``ConnectionState``.

    The Socket.IO client's built-in reconnection is switched off; the session
    retries on its own so that the attempt count and the give-up point are
    observable. After ``max_reconnect_attempts`` failed attempts it stays
    disconnected until :meth:`reconnect` is called.
    """

    def __init__(
        self,
        url: str,
        *,
        socketio_path: str = "socket.io",
        max_reconnect_attempts: int = 5,
        reconnect_delay: float = 3.0,
        connect_timeout: float = 10.0,
        status_listener: StatusListener | None = None,
        client: Any | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._url = url
        self._socketio_path = socketio_path
        self._max_attempts = max_reconnect_attempts
        self._delay = reconnect_delay
        self._connect_timeout = connect_timeout
        self._status_listener = status_listener
        self._sleep = sleep
        self._client = client or socketio.AsyncClient(
            reconnection=False, logger=False, engineio_logger=False,
        )

        self._state = ConnectionState.DISCONNECTED
        self._attempts = 0
        self._exhausted = False
        self._closed = False
        self._reconnect_task: asyncio.Task[None] | None = None
        self._handler: InboundHandler | None = None
        self._active: ActiveConversation = lambda: None

        self._client.on("connect", self._on_connect)
        self._client.on("disconnect", self._on_disconnect)
        for name in EVENT_MODELS:
            self._client.on(name, self._make_listener(name))

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def bind(self, handler: InboundHandler, active_conversation: ActiveConversation) -> None:
        """Register the single consumer of inbound events."""
        if self._handler is not None and self._handler != handler:
            raise RuntimeError("TransportSession already has an event handler")
        self._handler = handler
        self._active = active_conversation

    # ---- connection lifecycle ---------------------------------------------

    async def connect(self) -> None:
        if self._state is not ConnectionState.DISCONNECTED or self._reconnecting():
            return
        self._closed = False
        if not await self._dial():
            await self._start_reconnect()

    async def reconnect(self) -> None:
        """User-triggered: forget previous failures and dial again."""
        await self._cancel_reconnect()
        self._attempts = 0
        self._exhausted = False
        await self.connect()

    async def close(self) -> None:
        self._closed = True
        await self._cancel_reconnect()
        if self._client.connected:
            await self._client.disconnect()
        self._state = ConnectionState.DISCONNECTED

    async def wait_reconnect(self) -> None:
        """Wait for a running reconnect loop to finish (connected or given up)."""
        if self._reconnect_task is not None:
            await asyncio.shield(self._reconnect_task)

    async def join_conversation(self, conversation_id: str) -> None:
        if self._state is not ConnectionState.CONNECTED:
            logger.debug("Not connected, join of %s deferred to next connect", conversation_id)
            return
        try:
            await self._client.emit(JOIN_EVENT, conversation_id)
        except SocketIOError:
            logger.warning("Could not join conversation %s", conversation_id, exc_info=True)

    async def _dial(self) -> bool:
        self._state = ConnectionState.CONNECTING
        logger.info("Connecting to %s", self._url)
        try:
            await self._client.connect(
                self._url,
                transports=["websocket", "polling"],
                socketio_path=self._socketio_path,
                wait_timeout=self._connect_timeout,
            )
        except _DIAL_ERRORS as exc:
            logger.warning("Connection to %s failed: %s", self._url, exc)
            self._state = ConnectionState.DISCONNECTED
            return False
        await self._mark_connected()
        return True

    async def _mark_connected(self) -> None:
        # Both the "connect" event and a returning dial end up here.
        if self._state is ConnectionState.CONNECTED:
            return
        self._state = ConnectionState.CONNECTED
        self._attempts = 0
        self._exhausted = False
        logger.info("Connected to %s", self._url)
        await self._publish(ConnectionStatus.CONNECTED)
        active = self._active()
        if active:
            await self.join_conversation(active)

    def _reconnecting(self) -> bool:
        return self._reconnect_task is not None and not self._reconnect_task.done()

    async def _start_reconnect(self) -> None:
        if self._closed or self._reconnecting():
            return
        await self._publish(ConnectionStatus.RECONNECTING)
        self._reconnect_task = asyncio.create_task(
            self._reconnect_loop(), name="socketio-reconnect",
        )

    async def _cancel_reconnect(self) -> None:
        task, self._reconnect_task = self._reconnect_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _reconnect_loop(self) -> None:
        while self._attempts < self._max_attempts:
            await self._sleep(self._delay)
            if self._closed or self._state is not ConnectionState.DISCONNECTED:
                return
            self._attempts += 1
            logger.info("Reconnect attempt %d/%d", self._attempts, self._max_attempts)
            if await self._dial():
                return
        self._exhausted = True
        logger.error(
            "Giving up on %s after %d reconnect attempts", self._url, self._attempts,
        )
        await self._publish(ConnectionStatus.DISCONNECTED)

    async def _publish(self, status: ConnectionStatus) -> None:
        if self._status_listener is None:
            return
        try:
            await self._status_listener(status)
        except Exception:
            logger.exception("Status listener failed for %s", status)

    # ---- socket callbacks --------------------------------------------------

    async def _on_connect(self) -> None:
        await self._mark_connected()

    async def _on_disconnect(self, *args: Any) -> None:
        if self._state is ConnectionState.DISCONNECTED:
            return
        self._state = ConnectionState.DISCONNECTED
        logger.warning("Disconnected from %s %s", self._url, args or "")
        if not self._closed:
            await self._start_reconnect()

    def _make_listener(self, name: str) -> Callable[[Any], Awaitable[None]]:
        async def listener(data: Any = None) -> None:
            await self._dispatch(name, data)

        return listener

    async def _dispatch(self, name: str, data: Any) -> None:
        try:
            event = parse_event(name, data)
        except ParseError as exc:
            logger.warning("Dropping malformed %s event: %s", name, exc.detail)
            return
        if self._handler is None:
            logger.debug("No handler bound, dropping %s", name)
            return
        try:
            await self._handler(event)
        except Exception:
            logger.exception("Error handling %s for %s", name, event.conversation_id)
