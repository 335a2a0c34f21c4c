"""Shared test fixtures."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import pytest

from itas_realtime.application.exceptions import ApiError
from itas_realtime.application.ports.transport import TransportListener
from itas_realtime.domain.entities.notification import Notification
from itas_realtime.services.channel import ChannelOptions, RealtimeChannel


@dataclass
class FakeTransport:
    url: str
    listener: TransportListener
    sent: list[str] = field(default_factory=list)
    closed: bool = False

    def send(self, raw: str) -> None:
        self.sent.append(raw)

    def close(self) -> None:
        self.closed = True

    # helpers that play the socket's side
    def open(self) -> None:
        self.listener.on_open()

    def drop(self) -> None:
        self.listener.on_close()

    def fail(self, error: BaseException | None = None) -> None:
        self.listener.on_error(error or ConnectionError("boom"))

    def receive(self, raw: str | bytes) -> None:
        self.listener.on_message(raw)


@dataclass
class FakeTransportFactory:
    transports: list[FakeTransport] = field(default_factory=list)

    def __call__(self, url: str, listener: TransportListener) -> FakeTransport:
        transport = FakeTransport(url=url, listener=listener)
        self.transports.append(transport)
        return transport

    @property
    def dials(self) -> int:
        return len(self.transports)

    @property
    def last(self) -> FakeTransport:
        return self.transports[-1]


@dataclass
class ManualHandle:
    delay: float
    callback: Callable[..., Any]
    args: tuple[Any, ...]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualTimer:
    """Timer whose deferred calls only run when the test fires them."""

    handles: list[ManualHandle] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualHandle:
        handle = ManualHandle(delay=delay, callback=callback, args=args)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def fire_next(self) -> None:
        handle = self.pending[0]
        handle.cancelled = True
        handle.callback(*handle.args)


@dataclass
class Recorder:
    """Collects option callbacks and listener events in call order."""

    calls: list[tuple[str, Any]] = field(default_factory=list)

    def options(self, **overrides: Any) -> ChannelOptions:
        return ChannelOptions(
            on_open=lambda: self.calls.append(("open", None)),
            on_close=lambda: self.calls.append(("close", None)),
            on_error=lambda exc: self.calls.append(("error", exc)),
            on_message=lambda env: self.calls.append(("message", env)),
            **overrides,
        )

    def count(self, name: str) -> int:
        return sum(1 for n, _ in self.calls if n == name)


@pytest.fixture
def factory() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture
def timer() -> ManualTimer:
    return ManualTimer()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


def make_channel(
    factory: FakeTransportFactory,
    timer: ManualTimer,
    *,
    options: ChannelOptions | None = None,
    token: str | None = None,
    url: str = "ws://relay.test/ws/notifications",
) -> RealtimeChannel:
    return RealtimeChannel(
        url,
        factory,
        options=options,
        token_provider=lambda: token,
        timer=timer,
    )


def make_notification(notification_id: int = 1, **overrides: Any) -> Notification:
    data: dict[str, Any] = {
        "id": notification_id,
        "title": "Filing deadline",
        "message": "VAT returns are due Friday",
        "notificationType": "IN_APP",
        "priority": "HIGH",
        "targetAudience": "TAXPAYER",
        "role": "TAXPAYER",
        "status": "SENT",
        "read": False,
        "sentCount": 10,
        "openedCount": 3,
        "createdAt": "2026-10-01T09:00:00Z",
    }
    data.update(overrides)
    return Notification.model_validate(data)


@dataclass
class FakeNotificationsApi:
    unread: list[Notification] = field(default_factory=list)
    count: int = 0
    fail: bool = False
    calls: list[tuple[str, Any]] = field(default_factory=list)

    def _check(self) -> None:
        if self.fail:
            raise ApiError("backend down", status_code=503)

    async def get_unread(self, role: str | None = None) -> list[Notification]:
        self.calls.append(("get_unread", role))
        self._check()
        return list(self.unread)

    async def get_unread_count(self, role: str | None = None) -> int:
        self.calls.append(("get_unread_count", role))
        self._check()
        return self.count

    async def mark_as_read(self, notification_id: int) -> None:
        self.calls.append(("mark_as_read", notification_id))
        self._check()
        self.unread = [n for n in self.unread if n.id != notification_id]
        self.count = len(self.unread)

    async def mark_all_as_read(self, role: str | None = None) -> None:
        self.calls.append(("mark_all_as_read", role))
        self._check()
        self.unread = []
        self.count = 0
