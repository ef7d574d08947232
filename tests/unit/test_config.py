from __future__ import annotations

from chat_console.config import Settings, settings


def test_test_environment_is_loaded():
    assert settings.BACKEND_URL == "http://backend.test"
    assert settings.RECONNECT_DELAY_SECONDS == 0
    assert settings.WS_HEARTBEAT_SECONDS == 3600


def test_socket_url_falls_back_to_backend_url():
    configured = Settings(BACKEND_URL="http://crm.local:3000", SOCKET_URL=None)

    assert configured.socket_url == "http://crm.local:3000"
