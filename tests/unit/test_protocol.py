from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from itas_realtime.application.exceptions import EnvelopeDecodeError
from itas_realtime.domain.envelope import Envelope
from itas_realtime.infrastructure.ws.protocol import decode_envelope, encode_envelope


class _FixedClock:
    def now(self) -> datetime:
        return datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)


def test_create_stamps_iso_timestamp():
    envelope = Envelope.create("webinar.starting", {"id": 3}, clock=_FixedClock())

    assert envelope.timestamp == "2026-10-19T08:30:00+00:00"
    assert envelope.data == {"id": 3}


def test_envelope_is_frozen():
    envelope = Envelope(type="t", data=None, timestamp="x")

    with pytest.raises(ValidationError):
        envelope.type = "other"


def test_encode_wire_shape():
    envelope = Envelope(type="notification.created", data=[1, "two"], timestamp="2026-01-01T00:00:00Z")

    assert json.loads(encode_envelope(envelope)) == {
        "type": "notification.created",
        "data": [1, "two"],
        "timestamp": "2026-01-01T00:00:00Z",
    }


def test_decode_accepts_bytes_and_missing_data():
    envelope = decode_envelope(b'{"type": "pong", "timestamp": "2026-01-01T00:00:00Z"}')

    assert envelope.type == "pong"
    assert envelope.data is None


def test_timestamp_is_not_validated_as_date():
    envelope = decode_envelope('{"type": "a", "data": 1, "timestamp": "whenever"}')

    assert envelope.timestamp == "whenever"


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "",
        "[]",
        '{"data": 1, "timestamp": "t"}',
        '{"type": "a", "data": 1}',
        '{"type": 5, "timestamp": "t"}',
    ],
)
def test_decode_rejects_malformed(raw):
    with pytest.raises(EnvelopeDecodeError):
        decode_envelope(raw)
