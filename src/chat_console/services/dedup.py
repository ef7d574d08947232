from __future__ import annotations

from collections.abc import Set

from chat_console.domain.entities.message import Message


def should_render(candidate: Message, rendered_ids: Set[str]) -> bool:
    """Return False when a message with the same id is already on screen.

    Every source (push, REST batch, fallback cache, optimistic send) goes
    through this before touching the thread, so a message id is rendered at
    most once whichever sources overlap.
    """
    return candidate.id not in rendered_ids
