"""Tagged union of everything the transport can deliver."""
from __future__ import annotations

from typing import TypeAlias

from chat_console.domain.events.analysis_completed import AnalysisCompleted
from chat_console.domain.events.conversation_updated import ConversationUpdated
from chat_console.domain.events.document_uploaded import DocumentUploaded
from chat_console.domain.events.message_created import MessageCreated

InboundEvent: TypeAlias = MessageCreated | ConversationUpdated | DocumentUploaded | AnalysisCompleted

__all__ = [
    "AnalysisCompleted",
    "ConversationUpdated",
    "DocumentUploaded",
    "InboundEvent",
    "MessageCreated",
]
