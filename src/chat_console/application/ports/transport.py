from __future__ import annotations

from typing import Any, Callable, Coroutine, Protocol

from chat_console.domain.events.inbound import InboundEvent

InboundHandler = Callable[[InboundEvent], Coroutine[Any, Any, None]]
ActiveConversation = Callable[[], str | None]


class ConversationChannel(Protocol):
    """The part of the transport session the sync coordinator talks to."""

    def bind(self, handler: InboundHandler, active_conversation: ActiveConversation) -> None: ...

    async def join_conversation(self, conversation_id: str) -> None: ...
