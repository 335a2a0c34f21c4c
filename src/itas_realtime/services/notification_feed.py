"""Unread-notification state for a signed-in session.

Kept fresh two ways: a slow poll of the unread count, and an immediate count
refresh whenever the realtime channel delivers a notification envelope.
Every failure is logged and degrades to empty/zero; nothing here raises to
the caller.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from itas_realtime.application.exceptions import AppError
from itas_realtime.domain.entities.notification import Notification
from itas_realtime.domain.envelope import Envelope
from itas_realtime.domain.events import ChannelEvent, Received

logger = logging.getLogger(__name__)

DEFAULT_POLL_SECONDS = 30.0

NOTIFICATION_EVENT_TYPES = frozenset({"notification.created", "notification.updated"})


class NotificationSource(Protocol):
    async def get_unread(self, role: str | None = None) -> list[Notification]: ...

    async def get_unread_count(self, role: str | None = None) -> int: ...

    async def mark_as_read(self, notification_id: int) -> object: ...

    async def mark_all_as_read(self, role: str | None = None) -> object: ...


class NotificationFeed:
    def __init__(
        self,
        api: NotificationSource,
        *,
        role: str | None = None,
        poll_interval: float = DEFAULT_POLL_SECONDS,
    ) -> None:
        self._api = api
        self._role = role
        self._poll_interval = poll_interval
        self._notifications: list[Notification] = []
        self._unread_count = 0
        self._loading = False
        self._poll_task: asyncio.Task[None] | None = None
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    @property
    def unread_count(self) -> int:
        return self._unread_count

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def refresh(self) -> None:
        self._loading = True
        try:
            self._notifications = await self._api.get_unread(self._role)
        except AppError as exc:
            logger.error("Error fetching notifications: %s", exc.detail)
            self._notifications = []
        finally:
            self._loading = False

    async def refresh_unread_count(self) -> None:
        try:
            self._unread_count = await self._api.get_unread_count(self._role)
        except AppError as exc:
            logger.error("Error fetching unread count: %s", exc.detail)
            self._unread_count = 0

    async def mark_as_read(self, notification_id: int) -> None:
        try:
            await self._api.mark_as_read(notification_id)
        except AppError as exc:
            logger.error("Error marking notification %d as read: %s", notification_id, exc.detail)
            return
        await self.refresh()
        await self.refresh_unread_count()

    async def mark_all_as_read(self) -> None:
        try:
            await self._api.mark_all_as_read(self._role)
        except AppError as exc:
            logger.error("Error marking all notifications as read: %s", exc.detail)
            return
        await self.refresh()
        await self.refresh_unread_count()

    async def start(self) -> None:
        if self._role is None or self.running:
            return
        await self.refresh()
        await self.refresh_unread_count()
        self._poll_task = asyncio.create_task(self._poll(), name="notification-feed-poll")
        logger.info("Notification feed started (role=%s, poll=%.0fs)", self._role, self._poll_interval)

    async def stop(self) -> None:
        tasks = list(self._pending)
        if self._poll_task is not None:
            tasks.append(self._poll_task)
            self._poll_task = None
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._pending.clear()

    def handle_envelope(self, envelope: Envelope) -> None:
        if envelope.type not in NOTIFICATION_EVENT_TYPES:
            return
        task = asyncio.get_running_loop().create_task(self.refresh_unread_count())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def on_channel_event(self, event: ChannelEvent) -> None:
        if isinstance(event, Received):
            self.handle_envelope(event.envelope)

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            await self.refresh_unread_count()
