from __future__ import annotations

from typing import Protocol, Sequence

from chat_console.application.dto.conversation import ConversationSummary
from chat_console.application.dto.notice import ErrorNotice
from chat_console.domain.entities.conversation_state import ConversationState
from chat_console.domain.entities.message import Message
from chat_console.domain.events.inbound import InboundEvent
from chat_console.domain.value_objects.enums import ConnectionStatus, ViewState


class ViewRenderer(Protocol):
    """Whatever paints the console: receives finished view data only."""

    async def render_thread(self, conversation_id: str, messages: Sequence[Message]) -> None: ...

    async def render_view_state(self, conversation_id: str, state: ViewState) -> None: ...

    async def render_conversation_list(self, states: Sequence[ConversationState]) -> None: ...

    async def render_conversation_detail(self, summary: ConversationSummary) -> None: ...

    async def render_badge(self, conversation_id: str, count: int) -> None: ...

    async def render_connection_status(self, status: ConnectionStatus) -> None: ...

    async def render_error(self, conversation_id: str | None, notice: ErrorNotice) -> None: ...

    async def render_side_event(self, event: InboundEvent) -> None: ...
