"""Messages that could not be persisted, kept for this session only."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from chat_console.domain.entities.message import Message
from chat_console.domain.value_objects.enums import MessageStatus, SenderRole


@dataclass(frozen=True, slots=True)
class FallbackEntry:
    role: SenderRole
    content: str
    created_at: datetime


class FallbackCache:
    """Append-only from the send path, read-only from the load path."""

    def __init__(self) -> None:
        self._entries: dict[str, list[FallbackEntry]] = {}

    def append(
        self,
        conversation_id: str,
        role: SenderRole,
        content: str,
        created_at: datetime,
    ) -> FallbackEntry:
        entry = FallbackEntry(role=role, content=content, created_at=created_at)
        self._entries.setdefault(conversation_id, []).append(entry)
        return entry

    def entries(self, conversation_id: str) -> tuple[FallbackEntry, ...]:
        return tuple(self._entries.get(conversation_id, ()))

    def is_empty(self, conversation_id: str) -> bool:
        return not self._entries.get(conversation_id)

    def as_messages(self, conversation_id: str) -> list[Message]:
        # Position-based ids stay stable across reloads, so the deduplicator
        # recognises an entry that is already on screen.
        return [
            Message(
                id=f"local-{conversation_id}-{index}",
                conversation_id=conversation_id,
                role=entry.role,
                content=entry.content,
                created_at=entry.created_at,
                status=MessageStatus.FAILED,
            )
            for index, entry in enumerate(self.entries(conversation_id))
        ]
