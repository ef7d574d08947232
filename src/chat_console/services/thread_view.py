"""The ordered, de-duplicated message list of the active conversation."""
from __future__ import annotations

import itertools
from bisect import insort
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from chat_console.domain.entities.message import Message
from chat_console.services.dedup import should_render


@dataclass(order=True, slots=True)
class _Slot:
    created_at: datetime
    arrival: int
    message: Message = field(compare=False)


class ThreadView:
    """Keeps messages sorted by timestamp; equal timestamps keep arrival order."""

    def __init__(self) -> None:
        self._slots: list[_Slot] = []
        self._ids: set[str] = set()
        self._arrivals = itertools.count()

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._ids

    @property
    def rendered_ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    def messages(self) -> tuple[Message, ...]:
        return tuple(slot.message for slot in self._slots)

    def get(self, message_id: str) -> Message | None:
        for slot in self._slots:
            if slot.message.id == message_id:
                return slot.message
        return None

    def clear(self) -> None:
        self._slots.clear()
        self._ids.clear()

    def replace(self, batch: Iterable[Message]) -> int:
        """Swap the whole thread for ``batch``; duplicate ids inside it are dropped."""
        self.clear()
        ordered = sorted(batch, key=lambda m: m.created_at)
        return sum(1 for message in ordered if self.insert(message))

    def insert(self, message: Message) -> bool:
        if not should_render(message, self._ids):
            return False
        insort(self._slots, _Slot(message.created_at, next(self._arrivals), message))
        self._ids.add(message.id)
        return True

    def remove(self, message_id: str) -> Message | None:
        for index, slot in enumerate(self._slots):
            if slot.message.id == message_id:
                del self._slots[index]
                self._ids.discard(message_id)
                return slot.message
        return None

    def update(self, message: Message) -> bool:
        """Replace the entry with the same id in place (status changes)."""
        for slot in self._slots:
            if slot.message.id == message.id:
                slot.message = message
                return True
        return False

    def confirm(self, temp_id: str, confirmed: Message) -> None:
        """Turn an optimistic entry into the server's copy.

        If the push echo already rendered ``confirmed`` the optimistic entry is
        simply dropped, so the message is still shown once.
        """
        self.remove(temp_id)
        self.insert(confirmed)
