"""ViewRenderer that paints by broadcasting frames to the browser console."""
from __future__ import annotations

from typing import Sequence

from chat_console.application.dto.conversation import ConversationSummary
from chat_console.application.dto.notice import ErrorNotice
from chat_console.domain.entities.conversation_state import ConversationState
from chat_console.domain.entities.message import Message
from chat_console.domain.events.inbound import AnalysisCompleted, InboundEvent
from chat_console.domain.value_objects.enums import ConnectionStatus, ViewState
from chat_console.infrastructure.ui.manager import ConnectionManager
from chat_console.infrastructure.ui.protocol import message_to_wire, state_to_wire


class BroadcastRenderer:
    """Implements application.ports.renderer.ViewRenderer."""

    def __init__(self, manager: ConnectionManager) -> None:
        self._manager = manager
        self.connection_status = ConnectionStatus.DISCONNECTED

    async def render_thread(self, conversation_id: str, messages: Sequence[Message]) -> None:
        await self._manager.broadcast(
            "thread.rendered",
            {
                "conversation_id": conversation_id,
                "messages": [message_to_wire(m) for m in messages],
            },
        )

    async def render_view_state(self, conversation_id: str, state: ViewState) -> None:
        await self._manager.broadcast(
            "view.state", {"conversation_id": conversation_id, "state": str(state)},
        )

    async def render_conversation_list(self, states: Sequence[ConversationState]) -> None:
        await self._manager.broadcast(
            "conversations.listed", {"conversations": [state_to_wire(s) for s in states]},
        )

    async def render_conversation_detail(self, summary: ConversationSummary) -> None:
        await self._manager.broadcast(
            "conversation.detail",
            {
                "conversation_id": summary.conversation_id,
                "title": summary.title,
                "last_activity": summary.last_activity.isoformat() if summary.last_activity else None,
            },
        )

    async def render_badge(self, conversation_id: str, count: int) -> None:
        await self._manager.broadcast(
            "badge.updated", {"conversation_id": conversation_id, "count": count},
        )

    async def render_connection_status(self, status: ConnectionStatus) -> None:
        self.connection_status = status
        await self._manager.broadcast("connection.status", {"status": str(status)})

    async def render_error(self, conversation_id: str | None, notice: ErrorNotice) -> None:
        await self._manager.broadcast(
            "error",
            {
                "conversation_id": conversation_id,
                "kind": notice.kind,
                "detail": notice.detail,
                "retry": notice.retry,
                "restore_content": notice.restore_content,
            },
        )

    async def render_side_event(self, event: InboundEvent) -> None:
        kind = "analysis_completed" if isinstance(event, AnalysisCompleted) else "document_uploaded"
        await self._manager.broadcast(
            "conversation.activity",
            {"conversation_id": event.conversation_id, "kind": kind, "payload": getattr(event, "payload", {})},
        )
