from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class ConversationSummary:
    """One row of the backend conversation list (or a detail fetch)."""

    conversation_id: str
    title: str = ""
    last_activity: datetime | None = None
    preview: str | None = None
