from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from chat_console.domain.value_objects.enums import MessageStatus, SenderRole


@dataclass(frozen=True, slots=True)
class Message:
    id: str
    conversation_id: str
    role: SenderRole
    content: str
    created_at: datetime
    status: MessageStatus = MessageStatus.SENT

    @property
    def is_local(self) -> bool:
        """True for entries that only exist client-side (optimistic or cached)."""
        return self.status is not MessageStatus.SENT
