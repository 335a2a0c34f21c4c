"""Entrypoint: python -m itas_realtime.relay"""
from __future__ import annotations

import uvicorn

from itas_realtime.config import settings


def main() -> None:
    uvicorn.run(
        "itas_realtime.relay.app:create_app",
        factory=True,
        host=settings.RELAY_HOST,
        port=settings.RELAY_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
