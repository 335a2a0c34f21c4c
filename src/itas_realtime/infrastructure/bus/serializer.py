"""Pub/Sub payload format for envelopes routed through the relay."""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from itas_realtime.domain.envelope import Envelope


@dataclass(frozen=True, slots=True)
class Broadcast:
    envelope: Envelope
    role: str | None = None
    user_id: str | None = None


def serialize_broadcast(broadcast: Broadcast) -> str:
    payload: dict[str, Any] = {
        "role": broadcast.role,
        "user_id": broadcast.user_id,
        "envelope": broadcast.envelope.model_dump(mode="json"),
    }
    return json.dumps(payload)


def deserialize_broadcast(raw: str | bytes) -> Broadcast:
    data = json.loads(raw)
    user_id = data.get("user_id")
    return Broadcast(
        envelope=Envelope.model_validate(data["envelope"]),
        role=data.get("role"),
        user_id=str(user_id) if user_id is not None else None,
    )
