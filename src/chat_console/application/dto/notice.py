from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

NoticeKind = Literal["history", "send", "delete", "list", "auth"]


@dataclass(frozen=True, slots=True)
class ErrorNotice:
    """Inline error shown next to the thread, optionally with a retry affordance."""

    kind: NoticeKind
    detail: str
    retry: bool = True
    # For failed sends: text to put back into the input box.
    restore_content: str | None = None


@dataclass(frozen=True, slots=True)
class Notification:
    title: str
    body: str
    tag: str
    conversation_id: str
