"""Entrypoint: python -m chat_console"""
from __future__ import annotations

import logging

import uvicorn

from chat_console.config import settings


def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "chat_console.app:create_app",
        factory=True,
        host=settings.CONSOLE_HOST,
        port=settings.CONSOLE_PORT,
        log_level=settings.LOG_LEVEL,
    )


if __name__ == "__main__":
    main()
