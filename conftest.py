"""Root conftest: load .env.test before chat_console is imported.

.env.test points BACKEND_URL and SOCKET_URL at an unreachable test host, sets
RECONNECT_DELAY_SECONDS to 0, and stretches WS_HEARTBEAT_SECONDS so the
console WebSocket tests never see a heartbeat frame.
"""
from __future__ import annotations

import os
from pathlib import Path

_env_test = Path(__file__).resolve().parent / ".env.test"
if _env_test.exists():
    for raw in _env_test.read_text().splitlines():
        entry = raw.strip()
        if not entry or entry.startswith("#"):
            continue
        key, _, value = entry.partition("=")
        os.environ.setdefault(key.strip(), value.strip())
