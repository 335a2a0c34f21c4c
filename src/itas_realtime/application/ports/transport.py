from __future__ import annotations

from typing import Protocol


class TransportListener(Protocol):
    """Lifecycle callbacks a transport reports to its owner."""

    def on_open(self) -> None: ...

    def on_close(self) -> None: ...

    def on_error(self, error: BaseException) -> None: ...

    def on_message(self, raw: str | bytes) -> None: ...


class Transport(Protocol):
    def send(self, raw: str) -> None: ...

    def close(self) -> None: ...


class TransportFactory(Protocol):
    """Start dialing ``url`` and return immediately.

    Outcomes arrive later through ``listener``; a transport reports at most one
    ``on_close``.
    """

    def __call__(self, url: str, listener: TransportListener) -> Transport: ...
