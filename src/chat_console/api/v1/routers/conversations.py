from __future__ import annotations

from fastapi import APIRouter

from chat_console.api.deps import ConsoleDep
from chat_console.api.v1.schemas.conversation import ConversationStateResponse, ThreadResponse

router = APIRouter(prefix="/api/v1/console", tags=["conversations"])


@router.get("/conversations", response_model=list[ConversationStateResponse])
async def list_conversations(console: ConsoleDep) -> list[ConversationStateResponse]:
    return [ConversationStateResponse.model_validate(s) for s in console.conversations()]


@router.post("/conversations/refresh", response_model=list[ConversationStateResponse])
async def refresh_conversations(console: ConsoleDep) -> list[ConversationStateResponse]:
    states = await console.refresh_conversations()
    return [ConversationStateResponse.model_validate(s) for s in states]


@router.post("/conversations/{conversation_id}/activate", response_model=ThreadResponse)
async def activate_conversation(conversation_id: str, console: ConsoleDep) -> ThreadResponse:
    snapshot = await console.select(conversation_id)
    return ThreadResponse.from_snapshot(snapshot)


@router.post("/conversations/{conversation_id}/reload", response_model=ThreadResponse)
async def reload_conversation(conversation_id: str, console: ConsoleDep) -> ThreadResponse:
    snapshot = await console.reload(conversation_id)
    return ThreadResponse.from_snapshot(snapshot)


@router.get("/thread", response_model=ThreadResponse)
async def current_thread(console: ConsoleDep) -> ThreadResponse:
    return ThreadResponse.from_snapshot(console.thread())
