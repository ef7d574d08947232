"""Wire models for backend payloads (socket events and REST bodies)."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from chat_console.application.exceptions import ParseError
from chat_console.domain.events.inbound import (
    AnalysisCompleted,
    ConversationUpdated,
    DocumentUploaded,
    InboundEvent,
    MessageCreated,
)
from chat_console.infrastructure.transport.mappers.message import wire_to_entity


def _to_str(value: Any) -> Any:
    # ids come back as ints (display ids) or UUID strings
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class MessageWire(BaseModel):
    """A row of the backend ``messages`` table, or the same shape in a push event."""

    model_config = ConfigDict(extra="ignore")

    id: str
    conversation_id: str | None = None
    role: str | None = None
    sent_by: str | None = None
    direction: str | None = None
    content: str = ""
    timestamp: datetime | None = None
    created_at: datetime | None = None
    status: str | None = None

    @field_validator("id", "conversation_id", mode="before")
    @classmethod
    def coerce_ids(cls, value: Any) -> Any:
        return _to_str(value)


class ConversationWire(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    business_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    lead_phone: str | None = None
    last_activity: datetime | None = None
    last_message: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _to_str(value)


class _ConversationRef(BaseModel):
    model_config = ConfigDict(extra="allow")

    conversation_id: str

    @field_validator("conversation_id", mode="before")
    @classmethod
    def coerce_conversation_id(cls, value: Any) -> Any:
        return _to_str(value)


class MessageCreatedWire(_ConversationRef):
    message: MessageWire


class ConversationUpdatedWire(_ConversationRef):
    last_activity: datetime | None = None
    last_message: str | None = None


# backend event name -> wire model
EVENT_MODELS: dict[str, type[_ConversationRef]] = {
    "new_message": MessageCreatedWire,
    "conversation_updated": ConversationUpdatedWire,
    "document_uploaded": _ConversationRef,
    "fcs_completed": _ConversationRef,
}


def parse_event(name: str, data: Any) -> InboundEvent:
    """Turn a raw Socket.IO event into a typed inbound event.

    Raises ParseError for unknown names and malformed payloads.
    """
    model = EVENT_MODELS.get(name)
    if model is None:
        raise ParseError(f"unknown event {name!r}")
    if not isinstance(data, dict):
        raise ParseError(f"{name}: expected an object, got {type(data).__name__}")
    try:
        wire = model.model_validate(data)
    except PydanticValidationError as exc:
        raise ParseError(f"{name}: {exc.error_count()} invalid field(s)") from exc

    conversation_id = wire.conversation_id
    if isinstance(wire, MessageCreatedWire):
        return MessageCreated(
            conversation_id=conversation_id,
            message=wire_to_entity(wire.message, conversation_id=conversation_id),
        )
    if isinstance(wire, ConversationUpdatedWire):
        return ConversationUpdated(
            conversation_id=conversation_id,
            last_activity=wire.last_activity,
            preview=wire.last_message,
        )
    extra = dict(wire.model_extra or {})
    if name == "document_uploaded":
        return DocumentUploaded(conversation_id=conversation_id, payload=extra)
    return AnalysisCompleted(conversation_id=conversation_id, payload=extra)
