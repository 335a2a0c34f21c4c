"""Push relay: fans envelopes published on Redis out to connected sessions."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from itas_realtime.config import settings
from itas_realtime.domain.envelope import Envelope
from itas_realtime.infrastructure.bus.redis_pubsub import RedisPubSubPublisher, RedisPubSubSubscriber
from itas_realtime.infrastructure.bus.serializer import Broadcast
from itas_realtime.relay.routers import health, ws

logger = logging.getLogger(__name__)


async def _on_broadcast(broadcast: Broadcast) -> None:
    """Dispatch a Redis Pub/Sub broadcast to local WS connections."""
    sent = await ws.get_manager().dispatch(broadcast)
    logger.debug("Relayed %s to %d socket(s)", broadcast.envelope.type, sent)


async def publish_envelope(
    redis: aioredis.Redis,
    envelope: Envelope,
    *,
    role: str | None = None,
    user_id: str | int | None = None,
    channel: str | None = None,
) -> int:
    """Producer-side helper: publish one envelope for relaying."""
    publisher = RedisPubSubPublisher(redis, channel or settings.RELAY_PUBSUB_CHANNEL)
    return await publisher.publish(envelope, role=role, user_id=user_id)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    app.state.redis = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    logger.info("Redis connection pool created")

    subscriber = RedisPubSubSubscriber(
        app.state.redis,
        settings.RELAY_PUBSUB_CHANNEL,
        _on_broadcast,
    )
    await subscriber.start()
    app.state.pubsub_subscriber = subscriber

    yield

    await subscriber.stop()
    await app.state.redis.aclose()
    logger.info("Redis connection pool closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="ITAS Realtime Relay",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(ws.router)

    return app
