from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from chat_console.application.exceptions import ParseError
from chat_console.domain.entities.message import Message
from chat_console.domain.value_objects.enums import MessageStatus, SenderRole

if TYPE_CHECKING:
    from chat_console.infrastructure.transport.protocol import MessageWire


def as_utc(value: datetime) -> datetime:
    """Naive timestamps from the backend are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _role(wire: MessageWire) -> SenderRole:
    if wire.role:
        try:
            return SenderRole(wire.role)
        except ValueError:
            pass
    if wire.sent_by == "system" or wire.role == "assistant":
        return SenderRole.SYSTEM
    if wire.direction == "inbound":
        return SenderRole.COUNTERPARTY
    return SenderRole.USER


def wire_to_entity(wire: MessageWire, *, conversation_id: str | None = None) -> Message:
    created_at = wire.timestamp or wire.created_at
    if created_at is None:
        raise ParseError(f"message {wire.id} has no timestamp")
    owner = wire.conversation_id or conversation_id
    if owner is None:
        raise ParseError(f"message {wire.id} has no conversation")
    status = MessageStatus.FAILED if wire.status == "failed" else MessageStatus.SENT
    return Message(
        id=wire.id,
        conversation_id=owner,
        role=_role(wire),
        content=wire.content,
        created_at=as_utc(created_at),
        status=status,
    )
