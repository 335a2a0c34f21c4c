"""Transport backed by the ``websockets`` asyncio client."""
from __future__ import annotations

import asyncio
import logging

import websockets
from websockets.exceptions import ConnectionClosedOK

from itas_realtime.application.ports.transport import TransportFactory, TransportListener

logger = logging.getLogger(__name__)

DEFAULT_OPEN_TIMEOUT = 10.0


class WebsocketsTransport:
    """One socket lifetime: dial, read until closed, report close once.

    Must be created from inside a running event loop. After ``close()`` the
    listener hears nothing more.
    """

    def __init__(
        self,
        url: str,
        listener: TransportListener,
        *,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT,
    ) -> None:
        self._url = url
        self._listener = listener
        self._open_timeout = open_timeout
        self._outbox: asyncio.Queue[str] = asyncio.Queue()
        self._closed = False
        self._writer_stopped = False
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="itas-realtime-transport",
        )

    def send(self, raw: str) -> None:
        if self._closed or self._writer_stopped:
            logger.debug("Dropping outbound frame: transport cannot write")
            return
        self._outbox.put_nowait(raw)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._task.cancel()

    async def _run(self) -> None:
        try:
            async with websockets.connect(self._url, open_timeout=self._open_timeout) as ws:
                if self._closed:
                    return
                self._listener.on_open()
                writer = asyncio.create_task(self._write(ws), name="itas-realtime-writer")
                try:
                    async for frame in ws:
                        if self._closed:
                            break
                        self._listener.on_message(frame)
                finally:
                    writer.cancel()
        except asyncio.CancelledError:
            if not self._closed:
                raise
        except ConnectionClosedOK:
            pass
        except Exception as exc:
            if not self._closed:
                self._listener.on_error(exc)
        finally:
            if not self._closed:
                self._closed = True
                self._listener.on_close()

    async def _write(self, ws: websockets.ClientConnection) -> None:
        while True:
            raw = await self._outbox.get()
            try:
                await ws.send(raw)
            except Exception:
                logger.debug("Realtime writer stopped", exc_info=True)
                self._writer_stopped = True
                while not self._outbox.empty():
                    self._outbox.get_nowait()
                return


def websockets_transport_factory(*, open_timeout: float = DEFAULT_OPEN_TIMEOUT) -> TransportFactory:
    def factory(url: str, listener: TransportListener) -> WebsocketsTransport:
        return WebsocketsTransport(url, listener, open_timeout=open_timeout)

    return factory
