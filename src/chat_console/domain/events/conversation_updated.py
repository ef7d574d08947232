from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class ConversationUpdated:
    conversation_id: str
    last_activity: datetime | None = None
    preview: str | None = None
