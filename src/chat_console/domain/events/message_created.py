from __future__ import annotations

from dataclasses import dataclass

from chat_console.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class MessageCreated:
    conversation_id: str
    message: Message
