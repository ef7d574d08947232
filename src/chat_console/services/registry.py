"""In-memory last-known state of every conversation seen this session."""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterator

from chat_console.domain.entities.conversation_state import ConversationState
from chat_console.domain.value_objects.ids import ConversationId

logger = logging.getLogger(__name__)

_NEVER = datetime.min.replace(tzinfo=timezone.utc)


class ActivityOrder:
    """Conversation ids, most recent activity first.

    Sorting happens on iteration over the registry's current contents, so
    the same object can be iterated again after the registry changes.
    """

    def __init__(self, states: dict[ConversationId, ConversationState]) -> None:
        self._states = states

    def __iter__(self) -> Iterator[ConversationId]:
        by_id = sorted(self._states.values(), key=lambda s: s.conversation_id)
        # sorted() is stable with reverse=True, so equal timestamps keep id order
        ordered = sorted(by_id, key=lambda s: s.last_activity or _NEVER, reverse=True)
        for state in ordered:
            yield ConversationId(state.conversation_id)


class ConversationRegistry:
    def __init__(self) -> None:
        self._states: dict[ConversationId, ConversationState] = {}

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def get(self, conversation_id: str) -> ConversationState | None:
        return self._states.get(ConversationId(conversation_id))

    def upsert(
        self,
        conversation_id: str,
        *,
        last_activity: datetime | None = None,
        preview: str | None = None,
        title: str | None = None,
    ) -> ConversationState:
        """Merge a partial update; ``None`` leaves a field unchanged.

        ``last_activity`` never moves backwards, so a stale list load cannot
        undo an ordering change made by a newer push event.
        """
        key = ConversationId(conversation_id)
        state = self._states.get(key) or ConversationState(conversation_id=key)
        changes: dict[str, object] = {}
        outdated = (
            last_activity is not None
            and state.last_activity is not None
            and last_activity < state.last_activity
        )
        if last_activity is not None and not outdated and last_activity != state.last_activity:
            changes["last_activity"] = last_activity
        # an older update must not pair its preview with newer activity
        if preview is not None and not outdated:
            changes["preview"] = preview
        if title is not None:
            changes["title"] = title
        if changes:
            state = replace(state, **changes)
        self._states[key] = state
        return state

    def increment_unread(self, conversation_id: str) -> int:
        state = self.upsert(conversation_id)
        state = replace(state, unread=state.unread + 1)
        self._states[ConversationId(conversation_id)] = state
        return state.unread

    def clear_unread(self, conversation_id: str) -> None:
        state = self.upsert(conversation_id)
        if state.unread:
            logger.debug("Clearing %d unread for %s", state.unread, conversation_id)
            self._states[ConversationId(conversation_id)] = replace(state, unread=0)

    def ordered_by_activity(self) -> ActivityOrder:
        return ActivityOrder(self._states)

    def snapshot(self) -> list[ConversationState]:
        """States in list order."""
        return [self._states[cid] for cid in self.ordered_by_activity()]
