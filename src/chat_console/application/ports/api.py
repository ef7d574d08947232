from __future__ import annotations

from typing import Protocol

from chat_console.application.dto.conversation import ConversationSummary
from chat_console.domain.entities.message import Message


class ConversationApi(Protocol):
    """REST side of the console backend.

    Implementations raise TransportError on network failures and timeouts,
    AuthError on 401/403, FetchError on other non-2xx answers and ParseError
    on malformed bodies. Nothing is retried.
    """

    async def fetch_history(self, conversation_id: str) -> list[Message]: ...

    async def fetch_conversation(self, conversation_id: str) -> ConversationSummary: ...

    async def fetch_conversation_list(self) -> list[ConversationSummary]: ...

    async def send_message(self, conversation_id: str, content: str) -> Message: ...

    async def delete_message(self, conversation_id: str, message_id: str) -> None: ...
