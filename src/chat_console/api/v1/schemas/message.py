from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from chat_console.domain.value_objects.enums import MessageStatus, SenderRole


class SendMessageRequest(BaseModel):
    content: str = Field(min_length=1, max_length=4000)


class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    role: SenderRole
    content: str
    created_at: datetime
    status: MessageStatus

    model_config = {"from_attributes": True}
