from __future__ import annotations

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    BACKEND_URL: str = "http://localhost:3000"
    SOCKET_URL: str | None = None
    SOCKETIO_PATH: str = "socket.io"

    HTTP_TIMEOUT_SECONDS: float = 10.0
    SOCKET_CONNECT_TIMEOUT_SECONDS: float = 10.0

    RECONNECT_ATTEMPTS: int = 5
    RECONNECT_DELAY_SECONDS: float = 3.0

    RELOAD_SUPPRESS_SECONDS: float = 2.0

    NOTIFY_SOUND: bool = True
    NOTIFICATION_PREVIEW_CHARS: int = 100

    CONSOLE_HOST: str = "127.0.0.1"
    CONSOLE_PORT: int = 8000
    CORS_ORIGINS: list[str] = ["*"]
    WS_HEARTBEAT_SECONDS: int = 30

    LOG_LEVEL: str = "info"

    @property
    def socket_url(self) -> str:
        return self.SOCKET_URL or self.BACKEND_URL

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
