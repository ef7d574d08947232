"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from chat_console.application.dto.conversation import ConversationSummary
from chat_console.application.dto.notice import ErrorNotice, Notification
from chat_console.application.ports.transport import ActiveConversation, InboundHandler
from chat_console.domain.entities.message import Message
from chat_console.domain.events.inbound import InboundEvent
from chat_console.domain.value_objects.enums import MessageStatus, SenderRole, ViewState

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


def make_message(
    message_id: str,
    *,
    conversation_id: str = "c1",
    content: str = "hello",
    seconds: float = 0,
    role: SenderRole = SenderRole.COUNTERPARTY,
    status: MessageStatus = MessageStatus.SENT,
) -> Message:
    return Message(
        id=message_id,
        conversation_id=conversation_id,
        role=role,
        content=content,
        created_at=at(seconds),
        status=status,
    )


@dataclass
class FakeClock:
    current: datetime = T0

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@dataclass
class FakeConversationApi:
    """In-memory backend.

    ``gates`` holds an asyncio.Event per conversation; a history fetch for it
    waits until the event is set, which lets tests deliver responses late.
    """

    histories: dict[str, list[Message]] = field(default_factory=dict)
    history_errors: dict[str, Exception] = field(default_factory=dict)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    summaries: list[ConversationSummary] = field(default_factory=list)
    list_error: Exception | None = None
    detail_error: Exception | None = None
    send_error: Exception | None = None
    delete_error: Exception | None = None
    send_gate: asyncio.Event | None = None
    detail_gate: asyncio.Event | None = None
    send_seconds: float = 60

    history_calls: list[str] = field(default_factory=list)
    detail_calls: list[str] = field(default_factory=list)
    sent: list[tuple[str, str]] = field(default_factory=list)
    deleted: list[tuple[str, str]] = field(default_factory=list)
    _ids: Any = field(default_factory=lambda: itertools.count(1))

    async def fetch_history(self, conversation_id: str) -> list[Message]:
        self.history_calls.append(conversation_id)
        gate = self.gates.get(conversation_id)
        if gate is not None:
            await gate.wait()
        error = self.history_errors.get(conversation_id)
        if error is not None:
            raise error
        return list(self.histories.get(conversation_id, []))

    async def fetch_conversation(self, conversation_id: str) -> ConversationSummary:
        self.detail_calls.append(conversation_id)
        if self.detail_gate is not None:
            await self.detail_gate.wait()
        if self.detail_error is not None:
            raise self.detail_error
        for summary in self.summaries:
            if summary.conversation_id == conversation_id:
                return summary
        return ConversationSummary(conversation_id=conversation_id)

    async def fetch_conversation_list(self) -> list[ConversationSummary]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.summaries)

    async def send_message(self, conversation_id: str, content: str) -> Message:
        self.sent.append((conversation_id, content))
        if self.send_gate is not None:
            await self.send_gate.wait()
        if self.send_error is not None:
            raise self.send_error
        return make_message(
            f"srv-{next(self._ids)}",
            conversation_id=conversation_id,
            content=content,
            seconds=self.send_seconds,
            role=SenderRole.USER,
        )

    async def delete_message(self, conversation_id: str, message_id: str) -> None:
        self.deleted.append((conversation_id, message_id))
        if self.delete_error is not None:
            raise self.delete_error


@dataclass
class FakeChannel:
    """Stands in for the transport session on the coordinator's side."""

    handler: InboundHandler | None = None
    active: ActiveConversation | None = None
    joins: list[str] = field(default_factory=list)

    def bind(self, handler: InboundHandler, active_conversation: ActiveConversation) -> None:
        self.handler = handler
        self.active = active_conversation

    async def join_conversation(self, conversation_id: str) -> None:
        self.joins.append(conversation_id)

    async def push(self, event: InboundEvent) -> None:
        assert self.handler is not None
        await self.handler(event)


@dataclass
class RecordingRenderer:
    calls: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)
    fail_badge: bool = False
    # behave like a real socket send: suspend on every view-state update
    yields: bool = False

    def named(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]

    def last_thread(self) -> tuple[str, list[Message]]:
        conversation_id, messages = self.named("thread")[-1]
        return conversation_id, list(messages)

    def last_thread_ids(self) -> list[str]:
        return [m.id for m in self.last_thread()[1]]

    def states(self, conversation_id: str) -> list[ViewState]:
        return [state for cid, state in self.named("view_state") if cid == conversation_id]

    def errors(self) -> list[ErrorNotice]:
        return [notice for _, notice in self.named("error")]

    async def render_thread(self, conversation_id, messages) -> None:
        self.calls.append(("thread", (conversation_id, tuple(messages))))

    async def render_view_state(self, conversation_id, state) -> None:
        if self.yields:
            await asyncio.sleep(0)
        self.calls.append(("view_state", (conversation_id, state)))

    async def render_conversation_list(self, states) -> None:
        self.calls.append(("list", (tuple(states),)))

    async def render_conversation_detail(self, summary) -> None:
        self.calls.append(("detail", (summary,)))

    async def render_badge(self, conversation_id, count) -> None:
        if self.fail_badge:
            raise RuntimeError("badge element missing")
        self.calls.append(("badge", (conversation_id, count)))

    async def render_connection_status(self, status) -> None:
        self.calls.append(("connection", (status,)))

    async def render_error(self, conversation_id, notice) -> None:
        self.calls.append(("error", (conversation_id, notice)))

    async def render_side_event(self, event) -> None:
        self.calls.append(("side_event", (event,)))


@dataclass
class FakeNotifier:
    delivered: list[Notification] = field(default_factory=list)

    async def notify(self, notification: Notification) -> None:
        self.delivered.append(notification)


@dataclass
class FailingNotifier:
    attempts: int = 0

    async def notify(self, notification: Notification) -> None:
        self.attempts += 1
        raise PermissionError("notifications blocked")


@dataclass
class FakeSocketClient:
    """Mimics the parts of socketio.AsyncClient the transport session uses.

    ``outcomes`` is consumed one entry per connect call: an exception to raise,
    or None for success. When exhausted every call succeeds.
    """

    outcomes: list[Exception | None] = field(default_factory=list)
    # when set, connect waits for it before settling
    gate: asyncio.Event | None = None
    handlers: dict[str, Callable[..., Any]] = field(default_factory=dict)
    connected: bool = False
    connect_calls: int = 0
    connect_kwargs: list[dict[str, Any]] = field(default_factory=list)
    emitted: list[tuple[str, Any]] = field(default_factory=list)

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self.handlers[event] = handler

    async def connect(self, url: str, **kwargs: Any) -> None:
        self.connect_calls += 1
        self.connect_kwargs.append(kwargs)
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.pop(0) if self.outcomes else None
        if outcome is not None:
            raise outcome
        self.connected = True
        await self.fire("connect")

    async def disconnect(self) -> None:
        self.connected = False
        await self.fire("disconnect")

    async def emit(self, event: str, data: Any = None) -> None:
        self.emitted.append((event, data))

    async def fire(self, event: str, *args: Any) -> None:
        handler = self.handlers.get(event)
        if handler is not None:
            await handler(*args)

    async def drop(self) -> None:
        """Server-side disconnect."""
        self.connected = False
        await self.fire("disconnect", "transport close")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def api() -> FakeConversationApi:
    return FakeConversationApi()


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()
