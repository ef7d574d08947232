from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from chat_console.application.dto.thread import ThreadSnapshot
from chat_console.api.v1.schemas.message import MessageResponse
from chat_console.domain.value_objects.enums import ViewState


class ConversationStateResponse(BaseModel):
    conversation_id: str
    title: str
    preview: str
    last_activity: datetime | None
    unread: int
    badge_visible: bool

    model_config = {"from_attributes": True}


class ThreadResponse(BaseModel):
    conversation_id: str | None
    state: ViewState
    degraded: bool
    messages: list[MessageResponse]

    @classmethod
    def from_snapshot(cls, snapshot: ThreadSnapshot) -> ThreadResponse:
        return cls(
            conversation_id=snapshot.conversation_id,
            state=snapshot.state,
            degraded=snapshot.degraded,
            messages=[MessageResponse.model_validate(m) for m in snapshot.messages],
        )
