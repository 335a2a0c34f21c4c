"""JSON wire codec for channel envelopes."""
from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from itas_realtime.application.exceptions import EnvelopeDecodeError
from itas_realtime.domain.envelope import Envelope


def encode_envelope(envelope: Envelope) -> str:
    return envelope.model_dump_json()


def decode_envelope(raw: str | bytes) -> Envelope:
    try:
        return Envelope.model_validate_json(raw)
    except PydanticValidationError as exc:
        raise EnvelopeDecodeError(f"malformed frame: {exc.error_count()} error(s)") from exc
