from __future__ import annotations

from typing import NewType

# The backend hands out both UUIDs and numeric display ids; both travel as str.
ConversationId = NewType("ConversationId", str)
