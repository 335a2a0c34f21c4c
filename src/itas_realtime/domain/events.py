"""Typed events emitted by a realtime channel to its listeners."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from itas_realtime.domain.envelope import Envelope


@dataclass(frozen=True, slots=True)
class Opened:
    url: str


@dataclass(frozen=True, slots=True)
class Closed:
    explicit: bool
    will_reconnect: bool


@dataclass(frozen=True, slots=True)
class Errored:
    error: BaseException


@dataclass(frozen=True, slots=True)
class Received:
    envelope: Envelope


ChannelEvent = Union[Opened, Closed, Errored, Received]
