"""Entrypoint: python -m itas_realtime

Tails the realtime channel with the stored session credentials and logs
every envelope; with ITAS_ROLE set it also keeps the unread count fresh.
"""
from __future__ import annotations

import asyncio
import logging
import signal

from itas_realtime.bootstrap import (
    channel_options,
    create_channel,
    create_credential_store,
    create_feed,
    create_notifications_api,
)
from itas_realtime.config import settings
from itas_realtime.domain.envelope import Envelope
from itas_realtime.domain.value_objects.enums import ConnectionState
from itas_realtime.services.channel import RealtimeChannel

logger = logging.getLogger("itas_realtime")


def _log_envelope(envelope: Envelope) -> None:
    logger.info("%s @ %s: %s", envelope.type, envelope.timestamp, envelope.data)


def _ensure_dialed(channel: RealtimeChannel) -> None:
    # AUTO_CONNECT=false still tails once; it only turns off reconnects
    if channel.state is ConnectionState.CLOSED:
        logger.info("Auto-connect is off: dialing %s once without reconnect", channel.url)
        channel.connect()


async def run() -> None:
    store = create_credential_store(settings)
    options = channel_options(settings, on_message=_log_envelope)
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            pass

    async with create_notifications_api(settings, store) as api:
        feed = create_feed(settings, api)
        async with create_channel(settings, store, options) as channel:
            channel.add_listener(feed.on_channel_event)
            _ensure_dialed(channel)
            await feed.start()
            try:
                await stop.wait()
            finally:
                await feed.stop()
        logger.info("Stopped (last unread count=%d)", feed.unread_count)


def main() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(run())


if __name__ == "__main__":
    main()
