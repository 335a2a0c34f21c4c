"""Redis Pub/Sub — publish side + subscriber background task."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

import redis.asyncio as aioredis

from itas_realtime.domain.envelope import Envelope
from itas_realtime.infrastructure.bus.serializer import (
    Broadcast,
    deserialize_broadcast,
    serialize_broadcast,
)

logger = logging.getLogger(__name__)


class RedisPubSubPublisher:
    def __init__(self, redis: aioredis.Redis, channel: str) -> None:
        self._redis = redis
        self._channel = channel

    async def publish(
        self,
        envelope: Envelope,
        *,
        role: str | None = None,
        user_id: str | int | None = None,
    ) -> int:
        broadcast = Broadcast(
            envelope=envelope,
            role=role,
            user_id=str(user_id) if user_id is not None else None,
        )
        return await self._redis.publish(self._channel, serialize_broadcast(broadcast))


OnBroadcastCallback = Callable[[Broadcast], Coroutine[Any, Any, Any]]


class RedisPubSubSubscriber:
    """Background task that listens to a Redis channel and dispatches broadcasts."""

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        callback: OnBroadcastCallback,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name="redis-pubsub-subscriber")
        logger.info("Redis Pub/Sub subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Redis Pub/Sub subscriber stopped")

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    await self._callback(deserialize_broadcast(message["data"]))
                except Exception:
                    logger.exception("Error processing pubsub message")
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()
