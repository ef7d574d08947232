from __future__ import annotations

from chat_console.application.dto.notice import Notification
from chat_console.infrastructure.ui.manager import ConnectionManager


class BroadcastNotifier:
    """Asks the browser tabs to raise a platform notification (and a sound)."""

    def __init__(self, manager: ConnectionManager, *, sound: bool = True) -> None:
        self._manager = manager
        self._sound = sound

    async def notify(self, notification: Notification) -> None:
        await self._manager.broadcast(
            "notification",
            {
                "title": notification.title,
                "body": notification.body,
                "tag": notification.tag,
                "conversation_id": notification.conversation_id,
                "sound": self._sound,
            },
        )
