from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ITAS_WS_URL: str = "ws://localhost:8000/ws/notifications"
    ITAS_API_URL: str = "http://localhost:8080/api"
    ITAS_CREDENTIALS_PATH: str = "~/.itas/credentials.json"
    ITAS_ROLE: str | None = None

    AUTO_CONNECT: bool = True
    RECONNECT_INTERVAL_MS: int = 3000
    MAX_RECONNECT_ATTEMPTS: int | None = None
    RECONNECT_BACKOFF: Literal["fixed", "exponential"] = "fixed"
    WS_OPEN_TIMEOUT: float = 10.0

    NOTIFICATION_POLL_SECONDS: float = 30.0
    HTTP_TIMEOUT: float = 10.0

    LOG_LEVEL: str = "INFO"

    # push relay
    REDIS_URL: str = "redis://localhost:6379/0"
    RELAY_PUBSUB_CHANNEL: str = "itas.notifications"
    RELAY_HOST: str = "0.0.0.0"
    RELAY_PORT: int = 8000
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    CORS_ORIGINS: list[str] = ["*"]
    WS_HEARTBEAT_SECONDS: int = 30

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
