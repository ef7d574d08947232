"""Reconciles REST history, push events and the fallback cache into one thread.

The coordinator owns the visible thread of the active conversation and keeps
the conversation registry current for every conversation. All state lives on
one asyncio loop; anything read before an ``await`` is re-read afterwards.

History fetches carry a generation tag. Activating a conversation (or
starting a refresh) bumps the tag, and a fetch that lands with an outdated
tag, or for a conversation that is no longer active, is dropped.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import assert_never

from chat_console.application.dto.notice import ErrorNotice
from chat_console.application.dto.thread import ThreadSnapshot
from chat_console.application.exceptions import (
    LOAD_FAILURES,
    AuthError,
    ConsoleError,
    NotFoundError,
    ValidationError,
)
from chat_console.application.ports.api import ConversationApi
from chat_console.application.ports.clock import Clock, SystemClock
from chat_console.application.ports.renderer import ViewRenderer
from chat_console.application.ports.transport import ActiveConversation, ConversationChannel
from chat_console.domain.entities.conversation_state import ConversationState
from chat_console.domain.entities.message import Message
from chat_console.domain.events.inbound import (
    AnalysisCompleted,
    ConversationUpdated,
    DocumentUploaded,
    InboundEvent,
    MessageCreated,
)
from chat_console.domain.value_objects.enums import MessageStatus, SenderRole, ViewState
from chat_console.services.fallback_cache import FallbackCache
from chat_console.services.notifications import NotificationDispatcher
from chat_console.services.registry import ConversationRegistry
from chat_console.services.thread_view import ThreadView

logger = logging.getLogger(__name__)

_SETTLED = (ViewState.LOADING, ViewState.LOADED, ViewState.LOADED_EMPTY)


def _describe(exc: ConsoleError) -> str:
    return exc.detail or type(exc).__name__


class SyncCoordinator:
    def __init__(
        self,
        api: ConversationApi,
        transport: ConversationChannel,
        registry: ConversationRegistry,
        cache: FallbackCache,
        renderer: ViewRenderer,
        dispatcher: NotificationDispatcher,
        *,
        active_conversation: ActiveConversation,
        clock: Clock | None = None,
        reload_suppress_seconds: float = 2.0,
    ) -> None:
        self._api = api
        self._transport = transport
        self._registry = registry
        self._cache = cache
        self._renderer = renderer
        self._dispatcher = dispatcher
        self._active = active_conversation
        self._clock = clock or SystemClock()
        self._reload_suppress = timedelta(seconds=reload_suppress_seconds)

        self._view = ThreadView()
        self._view_conversation: str | None = None
        self._state = ViewState.IDLE
        self._degraded = False
        self._generation = 0
        self._fetching = False
        # Messages placed while a history fetch is in flight; re-applied on top
        # of the batch so a replace cannot drop them.
        self._pending: list[Message] = []
        # Optimistic sends of the thread on screen that the server has not
        # confirmed (pending or failed), by temporary id.
        self._local: dict[str, Message] = {}
        self._suppress_until: datetime | None = None
        self._deleting: set[str] = set()

        transport.bind(self.handle_event, active_conversation)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> ViewState:
        return self._state

    def snapshot(self) -> ThreadSnapshot:
        return ThreadSnapshot(
            conversation_id=self._view_conversation,
            state=self._state,
            messages=self._view.messages(),
            degraded=self._degraded,
        )

    # ---- activation / history ---------------------------------------------

    async def activate(self, conversation_id: str, *, force: bool = False) -> ThreadSnapshot:
        """Show ``conversation_id``; repeated triggers for the same one are no-ops.

        ``force`` reloads history even when already loaded (retry affordance).
        """
        same = conversation_id == self._view_conversation
        if same and not force and self._state in _SETTLED:
            logger.debug("Conversation %s already %s, skipping reload", conversation_id, self._state)
            return self.snapshot()

        # Must happen before the first await: no increment may slip in between.
        self._registry.clear_unread(conversation_id)
        self._generation += 1
        generation = self._generation
        self._view_conversation = conversation_id
        self._view.clear()
        self._pending.clear()
        if not same:
            self._local.clear()
        self._degraded = False
        self._state = ViewState.LOADING
        # Set before the first await so pushes arriving meanwhile are buffered.
        self._fetching = True

        await self._renderer.render_badge(conversation_id, 0)
        await self._renderer.render_view_state(conversation_id, ViewState.LOADING)
        if not same:
            await self._transport.join_conversation(conversation_id)
        await self._load_history(conversation_id, generation, keep_on_failure=False)
        return self.snapshot()

    async def refresh_active(self, conversation_id: str) -> None:
        """Re-fetch detail and history of the active conversation, nothing else."""
        self._generation += 1
        generation = self._generation
        self._fetching = True

        try:
            summary = await self._api.fetch_conversation(conversation_id)
        except ConsoleError as exc:
            logger.warning("Detail refresh for %s failed: %s", conversation_id, exc)
        else:
            if not self._is_stale(conversation_id, generation):
                self._registry.upsert(
                    conversation_id,
                    last_activity=summary.last_activity,
                    preview=summary.preview,
                    title=summary.title or None,
                )
                await self._renderer.render_conversation_detail(summary)

        if self._is_stale(conversation_id, generation):
            return
        await self._load_history(conversation_id, generation, keep_on_failure=True)

    async def _load_history(
        self,
        conversation_id: str,
        generation: int,
        *,
        keep_on_failure: bool,
    ) -> None:
        try:
            batch = await self._api.fetch_history(conversation_id)
        except AuthError as exc:
            if self._is_stale(conversation_id, generation):
                return
            self._fetching = False
            self._state = ViewState.ERROR
            await self._renderer.render_view_state(conversation_id, ViewState.ERROR)
            await self._renderer.render_error(
                conversation_id, ErrorNotice(kind="auth", detail=_describe(exc), retry=False),
            )
            return
        except LOAD_FAILURES as exc:
            if self._is_stale(conversation_id, generation):
                logger.debug("Ignoring failed stale history load for %s", conversation_id)
                return
            self._fetching = False
            logger.warning("History load for %s failed: %s", conversation_id, exc)
            if keep_on_failure and self._state in (ViewState.LOADED, ViewState.LOADED_EMPTY):
                self._pending.clear()
            else:
                await self._show_fallback(conversation_id)
            await self._renderer.render_error(
                conversation_id, ErrorNotice(kind="history", detail=_describe(exc)),
            )
            return

        if self._is_stale(conversation_id, generation):
            logger.info(
                "Discarding history for %s (generation %d, current %d)",
                conversation_id, generation, self._generation,
            )
            return

        self._fetching = False
        self._degraded = False
        self._view.replace(batch)
        self._flush_pending()
        self._reapply_local(include_failed=True)
        logger.debug("Loaded %d messages for %s", len(self._view), conversation_id)
        await self._render_thread(conversation_id)

    async def _show_fallback(self, conversation_id: str) -> None:
        cached = self._cache.as_messages(conversation_id)
        self._view.replace(cached)
        self._flush_pending()
        # failed sends are already among the cached entries
        self._reapply_local(include_failed=False)
        self._degraded = bool(cached)
        if cached:
            logger.info("Showing %d cached messages for %s", len(cached), conversation_id)
        await self._render_thread(conversation_id)

    def _is_stale(self, conversation_id: str, generation: int) -> bool:
        return (
            generation != self._generation
            or self._view_conversation != conversation_id
            or self._active() != conversation_id
        )

    def _flush_pending(self) -> None:
        for message in self._pending:
            self._view.insert(message)
        self._pending.clear()

    def _swap_pending(self, old_id: str, message: Message | None) -> None:
        self._pending = [m for m in self._pending if m.id != old_id]
        if message is not None and self._fetching:
            self._pending.append(message)

    def _reapply_local(self, *, include_failed: bool) -> None:
        for message in self._local.values():
            if include_failed or message.status is not MessageStatus.FAILED:
                self._view.insert(message)

    async def _render_thread(self, conversation_id: str) -> None:
        self._state = ViewState.LOADED if len(self._view) else ViewState.LOADED_EMPTY
        await self._renderer.render_view_state(conversation_id, self._state)
        await self._renderer.render_thread(conversation_id, self._view.messages())

    async def _place(self, conversation_id: str, message: Message) -> bool:
        """Put a message into the visible thread if that thread is on screen."""
        if self._view_conversation != conversation_id:
            logger.debug("Thread for %s not on screen, not placing %s", conversation_id, message.id)
            return False
        if self._fetching and message.id not in {m.id for m in self._pending}:
            self._pending.append(message)
        if self._state is ViewState.LOADING:
            return True
        if not self._view.insert(message):
            logger.debug("Skipping duplicate message %s", message.id)
            return False
        await self._render_thread(conversation_id)
        return True

    # ---- push events -------------------------------------------------------

    async def handle_event(self, event: InboundEvent) -> None:
        active = self._active()
        conversation_id = event.conversation_id
        self._registry.upsert(conversation_id)

        match event:
            case MessageCreated(message=message):
                self._registry.upsert(
                    conversation_id,
                    last_activity=message.created_at,
                    preview=message.content,
                )
                if conversation_id == active:
                    await self._place(conversation_id, message)
                else:
                    await self._dispatcher.dispatch(event)
            case ConversationUpdated():
                self._registry.upsert(
                    conversation_id,
                    last_activity=event.last_activity,
                    preview=event.preview,
                )
                if conversation_id == active:
                    if self._reload_suppressed():
                        logger.debug("Reload of %s suppressed after local send", conversation_id)
                    else:
                        await self.refresh_active(conversation_id)
            case DocumentUploaded() | AnalysisCompleted():
                if conversation_id == active:
                    await self._renderer.render_side_event(event)
            case _:
                assert_never(event)

        await self._renderer.render_conversation_list(self._registry.snapshot())

    def _reload_suppressed(self) -> bool:
        return self._suppress_until is not None and self._clock.now() < self._suppress_until

    # ---- user actions ------------------------------------------------------

    async def load_conversation_list(self) -> list[ConversationState]:
        try:
            summaries = await self._api.fetch_conversation_list()
        except ConsoleError as exc:
            auth = isinstance(exc, AuthError)
            await self._renderer.render_error(
                None,
                ErrorNotice(kind="auth" if auth else "list", detail=_describe(exc), retry=not auth),
            )
            raise

        for summary in summaries:
            self._registry.upsert(
                summary.conversation_id,
                last_activity=summary.last_activity,
                preview=summary.preview,
                title=summary.title or None,
            )
        states = self._registry.snapshot()
        await self._renderer.render_conversation_list(states)
        return states

    async def send_message(self, content: str) -> Message:
        """Optimistically render, persist through REST, reconcile with the server copy."""
        conversation_id = self._active()
        if conversation_id is None:
            raise ValidationError("No active conversation")
        text = content.strip()
        if not text:
            raise ValidationError("Message content is empty")

        now = self._clock.now()
        optimistic = Message(
            id=f"tmp-{uuid.uuid4().hex}",
            conversation_id=conversation_id,
            role=SenderRole.USER,
            content=text,
            created_at=now,
            status=MessageStatus.PENDING,
        )
        self._suppress_until = now + self._reload_suppress
        if self._view_conversation == conversation_id:
            self._local[optimistic.id] = optimistic
        await self._place(conversation_id, optimistic)

        try:
            sent = await self._api.send_message(conversation_id, text)
        except AuthError as exc:
            self._swap_pending(optimistic.id, None)
            self._local.pop(optimistic.id, None)
            if self._view_conversation == conversation_id and self._view.remove(optimistic.id):
                await self._render_thread(conversation_id)
            await self._renderer.render_error(
                conversation_id,
                ErrorNotice(kind="auth", detail=_describe(exc), retry=False, restore_content=text),
            )
            raise
        except LOAD_FAILURES as exc:
            logger.warning("Send to %s failed, keeping it locally: %s", conversation_id, exc)
            self._cache.append(conversation_id, SenderRole.USER, text, optimistic.created_at)
            failed = replace(optimistic, status=MessageStatus.FAILED)
            self._swap_pending(optimistic.id, None)
            if self._view_conversation == conversation_id:
                self._local[optimistic.id] = failed
                # A history replace may have dropped the pending entry meanwhile.
                if self._state is not ViewState.LOADING and (
                    self._view.update(failed) or self._view.insert(failed)
                ):
                    await self._render_thread(conversation_id)
            await self._renderer.render_error(
                conversation_id,
                ErrorNotice(kind="send", detail=_describe(exc), restore_content=text),
            )
            raise

        self._registry.upsert(conversation_id, last_activity=sent.created_at, preview=sent.content)
        self._local.pop(optimistic.id, None)
        self._swap_pending(optimistic.id, sent)
        if self._view_conversation == conversation_id:
            self._view.confirm(optimistic.id, sent)
            if self._state is not ViewState.LOADING:
                await self._render_thread(conversation_id)
        await self._renderer.render_conversation_list(self._registry.snapshot())
        return sent

    async def delete_message(self, message_id: str) -> None:
        """Remove a message from the thread and report it once to the backend."""
        conversation_id = self._active()
        if conversation_id is None or conversation_id != self._view_conversation:
            raise ValidationError("No active conversation")
        if message_id in self._deleting:
            logger.debug("Message %s already being deleted", message_id)
            return
        message = self._view.get(message_id)
        if message is None:
            raise NotFoundError(f"Message {message_id} is not in the thread")

        self._deleting.add(message_id)
        try:
            self._view.remove(message_id)
            self._swap_pending(message_id, None)
            self._local.pop(message_id, None)
            await self._render_thread(conversation_id)
            if message.is_local:
                return
            try:
                await self._api.delete_message(conversation_id, message_id)
            except ConsoleError as exc:
                logger.warning("Delete of %s failed: %s", message_id, exc)
                kind = "auth" if isinstance(exc, AuthError) else "delete"
                await self._renderer.render_error(
                    conversation_id, ErrorNotice(kind=kind, detail=_describe(exc), retry=False),
                )
                raise
        finally:
            self._deleting.discard(message_id)
