"""Wiring helpers: build channel, API client and feed from settings."""
from __future__ import annotations

from typing import Any, Callable

from itas_realtime.application.ports.credentials import CredentialStore
from itas_realtime.config import Settings
from itas_realtime.domain.envelope import Envelope
from itas_realtime.infrastructure.auth.credential_store import FileCredentialStore
from itas_realtime.infrastructure.http.notifications_api import NotificationsApi
from itas_realtime.infrastructure.ws.websockets_transport import websockets_transport_factory
from itas_realtime.services.channel import ChannelOptions, RealtimeChannel
from itas_realtime.services.notification_feed import NotificationFeed


def create_credential_store(settings: Settings) -> CredentialStore:
    return FileCredentialStore(settings.ITAS_CREDENTIALS_PATH)


def channel_options(
    settings: Settings,
    *,
    on_open: Callable[[], Any] | None = None,
    on_close: Callable[[], Any] | None = None,
    on_error: Callable[[BaseException], Any] | None = None,
    on_message: Callable[[Envelope], Any] | None = None,
) -> ChannelOptions:
    return ChannelOptions(
        on_open=on_open,
        on_close=on_close,
        on_error=on_error,
        on_message=on_message,
        auto_connect=settings.AUTO_CONNECT,
        reconnect_interval=settings.RECONNECT_INTERVAL_MS,
        max_reconnect_attempts=settings.MAX_RECONNECT_ATTEMPTS,
        backoff=settings.RECONNECT_BACKOFF,
    )


def create_channel(
    settings: Settings,
    store: CredentialStore,
    options: ChannelOptions | None = None,
) -> RealtimeChannel:
    return RealtimeChannel(
        settings.ITAS_WS_URL,
        websockets_transport_factory(open_timeout=settings.WS_OPEN_TIMEOUT),
        options=options or channel_options(settings),
        token_provider=store.get_token,
    )


def create_notifications_api(settings: Settings, store: CredentialStore) -> NotificationsApi:
    return NotificationsApi(
        settings.ITAS_API_URL,
        token_provider=store.get_token,
        timeout=settings.HTTP_TIMEOUT,
    )


def create_feed(settings: Settings, api: NotificationsApi, role: str | None = None) -> NotificationFeed:
    return NotificationFeed(
        api,
        role=role or settings.ITAS_ROLE,
        poll_interval=settings.NOTIFICATION_POLL_SECONDS,
    )
