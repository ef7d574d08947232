from __future__ import annotations

from enum import StrEnum


class SenderRole(StrEnum):
    USER = "user"
    COUNTERPARTY = "counterparty"
    SYSTEM = "system"


class MessageStatus(StrEnum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class ConnectionState(StrEnum):
    """Socket state, owned by the transport session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ConnectionStatus(StrEnum):
    """What the status indicator shows."""

    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    DISCONNECTED = "disconnected"


class ViewState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    LOADED_EMPTY = "loaded_empty"
    ERROR = "error"
