"""Real-time channel message envelope."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from itas_realtime.application.ports.clock import Clock, SystemClock


class Envelope(BaseModel):
    """Unit exchanged over the channel: ``{type, data, timestamp}``.

    ``type`` tells consumers how to read ``data``; the channel never looks at
    either. ``timestamp`` is the producer's ISO-8601 emission time and is
    advisory only.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    data: Any = None
    timestamp: str

    @classmethod
    def create(cls, type: str, data: Any = None, *, clock: Clock | None = None) -> Envelope:
        now = (clock or SystemClock()).now()
        return cls(type=type, data=data, timestamp=now.isoformat())
