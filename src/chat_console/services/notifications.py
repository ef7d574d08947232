from __future__ import annotations

import logging

from chat_console.application.dto.notice import Notification
from chat_console.application.ports.notifier import Notifier
from chat_console.application.ports.renderer import ViewRenderer
from chat_console.domain.events.message_created import MessageCreated
from chat_console.services.registry import ConversationRegistry

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Unread bookkeeping for messages landing outside the active conversation."""

    def __init__(
        self,
        registry: ConversationRegistry,
        renderer: ViewRenderer,
        notifier: Notifier | None = None,
        *,
        preview_chars: int = 100,
    ) -> None:
        self._registry = registry
        self._renderer = renderer
        self._notifier = notifier
        self._preview_chars = preview_chars

    async def dispatch(self, event: MessageCreated) -> int:
        """Count the message as unread, update the badge, alert. Returns the new count."""
        count = self._registry.increment_unread(event.conversation_id)
        logger.debug("Unread for %s is now %d", event.conversation_id, count)

        try:
            await self._renderer.render_badge(event.conversation_id, count)
        except Exception:
            logger.exception("Badge update failed for %s", event.conversation_id)

        if self._notifier is not None:
            notification = Notification(
                title="New message",
                body=event.message.content[: self._preview_chars],
                tag=f"message-{event.conversation_id}",
                conversation_id=event.conversation_id,
            )
            try:
                await self._notifier.notify(notification)
            except Exception:
                logger.debug("Could not deliver notification", exc_info=True)

        return count
