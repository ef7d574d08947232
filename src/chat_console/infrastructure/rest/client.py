"""httpx adapter for the console backend's REST routes."""
from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from chat_console.application.dto.conversation import ConversationSummary
from chat_console.application.exceptions import (
    AuthError,
    FetchError,
    ParseError,
    TransportError,
)
from chat_console.domain.entities.message import Message
from chat_console.infrastructure.transport.mappers.conversation import wire_to_summary
from chat_console.infrastructure.transport.mappers.message import wire_to_entity
from chat_console.infrastructure.transport.protocol import ConversationWire, MessageWire

logger = logging.getLogger(__name__)


def _unwrap(data: Any, key: str) -> Any:
    # Some routes answer with the bare object/array, others wrap it:
    # {"success": true, "messages": [...]}, {"conversation": {...}}.
    if isinstance(data, dict) and key in data:
        return data[key]
    return data


class HttpConversationApi:
    """Implements application.ports.api.ConversationApi."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch_history(self, conversation_id: str) -> list[Message]:
        data = await self._request("GET", f"/api/conversations/{conversation_id}/messages")
        rows = _unwrap(data, "messages")
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise ParseError(f"history for {conversation_id}: expected a list")

        messages: list[Message] = []
        for row in rows:
            try:
                wire = MessageWire.model_validate(row)
                messages.append(wire_to_entity(wire, conversation_id=conversation_id))
            except (PydanticValidationError, ParseError) as exc:
                logger.warning("Dropping malformed message in %s: %s", conversation_id, exc)
        return messages

    async def fetch_conversation(self, conversation_id: str) -> ConversationSummary:
        data = await self._request("GET", f"/api/conversations/{conversation_id}")
        return self._summary(_unwrap(data, "conversation"))

    async def fetch_conversation_list(self) -> list[ConversationSummary]:
        data = await self._request("GET", "/api/conversations")
        rows = _unwrap(data, "conversations")
        if not isinstance(rows, list):
            raise ParseError("conversation list: expected a list")

        summaries: list[ConversationSummary] = []
        for row in rows:
            try:
                summaries.append(self._summary(row))
            except ParseError as exc:
                logger.warning("Dropping malformed conversation row: %s", exc.detail)
        return summaries

    async def send_message(self, conversation_id: str, content: str) -> Message:
        data = await self._request(
            "POST",
            f"/api/conversations/{conversation_id}/messages",
            json={"message_content": content, "sender_type": "user"},
        )
        raw = _unwrap(data, "message")
        try:
            wire = MessageWire.model_validate(raw)
        except PydanticValidationError as exc:
            raise ParseError(f"send to {conversation_id}: malformed message") from exc
        return wire_to_entity(wire, conversation_id=conversation_id)

    async def delete_message(self, conversation_id: str, message_id: str) -> None:
        await self._request(
            "DELETE", f"/api/conversations/{conversation_id}/messages/{message_id}",
        )

    @staticmethod
    def _summary(raw: Any) -> ConversationSummary:
        try:
            return wire_to_summary(ConversationWire.model_validate(raw))
        except PydanticValidationError as exc:
            raise ParseError(f"malformed conversation: {exc.error_count()} invalid field(s)") from exc

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransportError(f"{method} {path} timed out") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"{method} {path}: {exc}") from exc

        if resp.status_code in (401, 403):
            raise AuthError(f"{method} {path}: {resp.status_code}")
        if resp.status_code >= 400:
            raise FetchError(
                f"{method} {path}: {self._error_detail(resp)}",
                status_code=resp.status_code,
            )
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise ParseError(f"{method} {path}: response is not JSON") from exc

    @staticmethod
    def _error_detail(resp: httpx.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            return resp.reason_phrase or str(resp.status_code)
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return resp.reason_phrase or str(resp.status_code)
