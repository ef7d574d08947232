from __future__ import annotations

from typing import Protocol

from chat_console.application.dto.notice import Notification


class Notifier(Protocol):
    """Passive alert: sound and/or platform notification. Best-effort."""

    async def notify(self, notification: Notification) -> None: ...
