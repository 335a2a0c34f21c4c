"""Resilient realtime channel: the surface application code talks to.

A channel owns at most one transport and at most one pending reconnect timer.
Every dial gets a fresh generation number; transport callbacks carry the
generation they were created with and are ignored once it is stale, so a
socket that was replaced or explicitly disconnected can never move the state
machine, reschedule a reconnect or reach an observer.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Callable
from urllib.parse import quote

from itas_realtime.application.exceptions import EnvelopeDecodeError
from itas_realtime.application.ports.credentials import TokenProvider
from itas_realtime.application.ports.timer import Timer, TimerHandle
from itas_realtime.application.ports.transport import Transport, TransportFactory
from itas_realtime.domain.envelope import Envelope
from itas_realtime.domain.events import ChannelEvent, Closed, Errored, Opened, Received
from itas_realtime.domain.state_machine import ConnectionStateMachine
from itas_realtime.domain.value_objects.enums import ChannelTrigger, ConnectionState
from itas_realtime.infrastructure.ws.protocol import decode_envelope, encode_envelope
from itas_realtime.services.reconnect import Backoff, ReconnectPolicy, ReconnectScheduler

logger = logging.getLogger(__name__)

ChannelListener = Callable[[ChannelEvent], Any]


@dataclass
class ChannelOptions:
    on_open: Callable[[], Any] | None = None
    on_close: Callable[[], Any] | None = None
    on_error: Callable[[BaseException], Any] | None = None
    on_message: Callable[[Envelope], Any] | None = None
    auto_connect: bool = True
    reconnect_interval: int = 3000  # ms
    max_reconnect_attempts: int | None = None
    backoff: Backoff = "fixed"

    def reconnect_policy(self) -> ReconnectPolicy:
        return ReconnectPolicy(
            interval=self.reconnect_interval / 1000,
            max_attempts=self.max_reconnect_attempts,
            enabled=self.auto_connect,
            backoff=self.backoff,
        )


def build_channel_url(base_url: str, token: str | None) -> str:
    """Append the bearer token as a ``token`` query credential when present.

    The token is percent-quoted; JWTs (base64url segments and dots) pass
    through unchanged, so the URI matches the raw ``?token=...`` form.
    """
    if not token:
        return base_url
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}token={quote(token, safe='')}"


class _RunningLoopTimer:
    """Timer backed by whichever asyncio loop is running at call time."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback, *args)


class _Binding:
    """Transport listener tied to one dial generation."""

    __slots__ = ("_channel", "_generation")

    def __init__(self, channel: RealtimeChannel, generation: int) -> None:
        self._channel = channel
        self._generation = generation

    def on_open(self) -> None:
        self._channel._handle_open(self._generation)

    def on_close(self) -> None:
        self._channel._handle_close(self._generation)

    def on_error(self, error: BaseException) -> None:
        self._channel._handle_error(self._generation, error)

    def on_message(self, raw: str | bytes) -> None:
        self._channel._handle_message(self._generation, raw)


class RealtimeChannel:
    def __init__(
        self,
        url: str,
        transport_factory: TransportFactory,
        *,
        options: ChannelOptions | None = None,
        token_provider: TokenProvider | None = None,
        timer: Timer | None = None,
    ) -> None:
        self._url = url
        self._transport_factory = transport_factory
        self._options = options or ChannelOptions()
        self._token_provider = token_provider
        self._machine = ConnectionStateMachine()
        self._scheduler = ReconnectScheduler(
            self._options.reconnect_policy(),
            timer or _RunningLoopTimer(),
        )
        self._transport: Transport | None = None
        self._generation = 0
        self._last_message: Envelope | None = None
        self._listeners: list[ChannelListener] = []

    # -- observable state -------------------------------------------------

    @property
    def url(self) -> str:
        return self._url

    @property
    def state(self) -> ConnectionState:
        return self._machine.state

    @property
    def is_connected(self) -> bool:
        return self._machine.state is ConnectionState.OPEN

    @property
    def last_message(self) -> Envelope | None:
        return self._last_message

    @property
    def reconnect_attempt(self) -> int:
        return self._machine.attempt

    @property
    def reconnect_pending(self) -> bool:
        return self._scheduler.pending

    @property
    def reconnect_exhausted(self) -> bool:
        return self._scheduler.exhausted

    def add_listener(self, listener: ChannelListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ChannelListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    # -- operations -------------------------------------------------------

    def connect(self) -> None:
        transition = self._machine.apply(ChannelTrigger.CONNECT)
        if not transition.changed:
            return
        self._scheduler.cancel()

        token = self._token_provider() if self._token_provider else None
        self._generation += 1
        generation = self._generation
        logger.info(
            "Connecting realtime channel to %s (attempt=%d, token=%s)",
            self._url,
            self._machine.attempt,
            "yes" if token else "no",
        )
        try:
            transport = self._transport_factory(
                build_channel_url(self._url, token),
                _Binding(self, generation),
            )
        except Exception as exc:
            logger.exception("Realtime transport could not be started")
            self._handle_error(generation, exc)
            self._handle_close(generation)
            return
        if self._is_current(generation):
            self._transport = transport

    def disconnect(self) -> None:
        self._scheduler.cancel()
        self._generation += 1

        transport, self._transport = self._transport, None
        if transport is not None:
            try:
                transport.close()
            except Exception:
                logger.exception("Error closing realtime transport")

        transition = self._machine.apply(ChannelTrigger.DISCONNECT)
        if transition.changed:
            logger.info("Realtime channel disconnected from %s", self._url)
            self._notify(Closed(explicit=True, will_reconnect=False), self._options.on_close)

    def send(self, envelope: Envelope) -> bool:
        transport = self._transport
        if self._machine.state is not ConnectionState.OPEN or transport is None:
            logger.debug("Dropping outbound %s: channel is %s", envelope.type, self._machine.state)
            return False
        try:
            transport.send(encode_envelope(envelope))
        except Exception:
            logger.exception("Failed to send %s frame", envelope.type)
            return False
        return True

    async def __aenter__(self) -> RealtimeChannel:
        if self._options.auto_connect:
            self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.disconnect()

    # -- transport callbacks ----------------------------------------------

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation and self._machine.state is not ConnectionState.CLOSED

    def _handle_open(self, generation: int) -> None:
        if not self._is_current(generation):
            return
        transition = self._machine.apply(ChannelTrigger.TRANSPORT_OPEN)
        if not transition.changed:
            return
        self._scheduler.reset()
        logger.info("Realtime channel open: %s", self._url)
        self._notify(Opened(url=self._url), self._options.on_open)

    def _handle_close(self, generation: int) -> None:
        if not self._is_current(generation):
            return
        self._transport = None
        transition = self._machine.apply(ChannelTrigger.TRANSPORT_CLOSE)
        if not transition.changed:
            return
        will_reconnect = self._scheduler.schedule(self._machine.attempt, self._reconnect)
        logger.info(
            "Realtime channel closed unexpectedly (attempt=%d, reconnect=%s)",
            self._machine.attempt,
            will_reconnect,
        )
        self._notify(Closed(explicit=False, will_reconnect=will_reconnect), self._options.on_close)

    def _handle_error(self, generation: int, error: BaseException) -> None:
        if not self._is_current(generation):
            return
        self._machine.apply(ChannelTrigger.TRANSPORT_ERROR)
        logger.error("Realtime channel transport error: %s", error)
        self._notify(Errored(error=error), self._options.on_error, error)

    def _handle_message(self, generation: int, raw: str | bytes) -> None:
        if not self._is_current(generation):
            return
        try:
            envelope = decode_envelope(raw)
        except EnvelopeDecodeError as exc:
            logger.warning("Dropping realtime frame: %s", exc.detail)
            return
        self._last_message = envelope
        self._notify(Received(envelope=envelope), self._options.on_message, envelope)

    def _reconnect(self) -> None:
        if self._machine.state is not ConnectionState.CLOSED:
            return
        self._machine.next_attempt()
        self.connect()

    def _notify(self, event: ChannelEvent, callback: Callable[..., Any] | None, *args: Any) -> None:
        if callback is not None:
            try:
                callback(*args)
            except Exception:
                logger.exception("Channel %s callback failed", type(event).__name__)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Channel listener failed on %s", type(event).__name__)
