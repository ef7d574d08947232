from __future__ import annotations

from dataclasses import dataclass

from chat_console.domain.entities.message import Message
from chat_console.domain.value_objects.enums import ViewState


@dataclass(frozen=True, slots=True)
class ThreadSnapshot:
    conversation_id: str | None
    state: ViewState
    messages: tuple[Message, ...] = ()
    # True when the thread was served from the fallback cache.
    degraded: bool = False
