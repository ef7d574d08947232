from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class ConversationState:
    conversation_id: str
    last_activity: datetime | None = None
    preview: str = ""
    unread: int = 0
    title: str = ""

    @property
    def badge_visible(self) -> bool:
        return self.unread > 0
