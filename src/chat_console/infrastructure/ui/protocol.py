"""Frames exchanged with browser tabs on /ws/console."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from chat_console.domain.entities.conversation_state import ConversationState
from chat_console.domain.entities.message import Message


class ConsoleInbound(BaseModel):
    """Browser → console."""

    type: str  # ping | select | send | reconnect
    data: dict[str, Any] = {}


class ConsoleOutbound(BaseModel):
    """Console → browser."""

    type: str  # thread.rendered | view.state | badge.updated | connection.status | error | ...
    data: dict[str, Any] = {}


def message_to_wire(message: Message) -> dict[str, Any]:
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "role": str(message.role),
        "content": message.content,
        "timestamp": message.created_at.isoformat(),
        "status": str(message.status),
    }


def state_to_wire(state: ConversationState) -> dict[str, Any]:
    return {
        "conversation_id": state.conversation_id,
        "title": state.title,
        "preview": state.preview,
        "last_activity": state.last_activity.isoformat() if state.last_activity else None,
        "unread": state.unread,
        "badge_visible": state.badge_visible,
    }
