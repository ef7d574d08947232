from __future__ import annotations

from fastapi import APIRouter, Response

from chat_console.api.deps import ConsoleDep
from chat_console.api.v1.schemas.message import MessageResponse, SendMessageRequest
from chat_console.application.exceptions import ValidationError

router = APIRouter(prefix="/api/v1/console/conversations", tags=["messages"])


def _require_active(active: str | None, conversation_id: str) -> None:
    if active != conversation_id:
        raise ValidationError(f"Conversation {conversation_id} is not the active conversation")


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    conversation_id: str,
    body: SendMessageRequest,
    console: ConsoleDep,
) -> MessageResponse:
    _require_active(console.active_conversation(), conversation_id)
    msg = await console.send(body.content)
    return MessageResponse.model_validate(msg)


@router.delete("/{conversation_id}/messages/{message_id}", status_code=204)
async def delete_message(conversation_id: str, message_id: str, console: ConsoleDep) -> Response:
    _require_active(console.active_conversation(), conversation_id)
    await console.delete(message_id)
    return Response(status_code=204)
