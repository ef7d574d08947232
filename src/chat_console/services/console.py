"""The application shell around the sync engine.

``ChatConsole`` owns the active-conversation pointer (the engine only ever
reads it), the registry and the fallback cache, and exposes the user actions
the HTTP/WebSocket console calls.
"""
from __future__ import annotations

import logging

from chat_console.application.dto.thread import ThreadSnapshot
from chat_console.application.exceptions import ConsoleError
from chat_console.application.ports.api import ConversationApi
from chat_console.application.ports.clock import Clock
from chat_console.application.ports.notifier import Notifier
from chat_console.application.ports.renderer import ViewRenderer
from chat_console.domain.entities.conversation_state import ConversationState
from chat_console.domain.entities.message import Message
from chat_console.domain.value_objects.enums import ConnectionState
from chat_console.infrastructure.transport.session import TransportSession
from chat_console.services.fallback_cache import FallbackCache
from chat_console.services.notifications import NotificationDispatcher
from chat_console.services.registry import ConversationRegistry
from chat_console.services.sync_coordinator import SyncCoordinator

logger = logging.getLogger(__name__)


class ChatConsole:
    def __init__(
        self,
        api: ConversationApi,
        transport: TransportSession,
        renderer: ViewRenderer,
        notifier: Notifier | None = None,
        *,
        clock: Clock | None = None,
        reload_suppress_seconds: float = 2.0,
        preview_chars: int = 100,
    ) -> None:
        self._active_id: str | None = None
        self.transport = transport
        self.registry = ConversationRegistry()
        self.cache = FallbackCache()
        self.dispatcher = NotificationDispatcher(
            self.registry, renderer, notifier, preview_chars=preview_chars,
        )
        self.coordinator = SyncCoordinator(
            api,
            transport,
            self.registry,
            self.cache,
            renderer,
            self.dispatcher,
            active_conversation=self.active_conversation,
            clock=clock,
            reload_suppress_seconds=reload_suppress_seconds,
        )

    def active_conversation(self) -> str | None:
        return self._active_id

    @property
    def connection_state(self) -> ConnectionState:
        return self.transport.state

    async def start(self) -> None:
        await self.transport.connect()
        try:
            await self.coordinator.load_conversation_list()
        except ConsoleError as exc:
            logger.warning("Initial conversation list load failed: %s", exc)

    async def stop(self) -> None:
        await self.transport.close()

    async def select(self, conversation_id: str) -> ThreadSnapshot:
        self._active_id = conversation_id
        return await self.coordinator.activate(conversation_id)

    async def reload(self, conversation_id: str) -> ThreadSnapshot:
        self._active_id = conversation_id
        return await self.coordinator.activate(conversation_id, force=True)

    async def send(self, content: str) -> Message:
        return await self.coordinator.send_message(content)

    async def delete(self, message_id: str) -> None:
        await self.coordinator.delete_message(message_id)

    async def refresh_conversations(self) -> list[ConversationState]:
        return await self.coordinator.load_conversation_list()

    async def reconnect(self) -> ConnectionState:
        await self.transport.reconnect()
        return self.transport.state

    def conversations(self) -> list[ConversationState]:
        return self.registry.snapshot()

    def thread(self) -> ThreadSnapshot:
        return self.coordinator.snapshot()
