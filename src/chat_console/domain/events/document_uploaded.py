from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class DocumentUploaded:
    conversation_id: str
    payload: dict[str, Any] = field(default_factory=dict)
