from __future__ import annotations

from typing import TYPE_CHECKING

from chat_console.application.dto.conversation import ConversationSummary
from chat_console.infrastructure.transport.mappers.message import as_utc

if TYPE_CHECKING:
    from chat_console.infrastructure.transport.protocol import ConversationWire


def _title(wire: ConversationWire) -> str:
    if wire.business_name:
        return wire.business_name
    name = " ".join(part for part in (wire.first_name, wire.last_name) if part)
    return name or wire.lead_phone or ""


def wire_to_summary(wire: ConversationWire) -> ConversationSummary:
    return ConversationSummary(
        conversation_id=wire.id,
        title=_title(wire),
        last_activity=as_utc(wire.last_activity) if wire.last_activity else None,
        preview=wire.last_message,
    )
