from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from itas_realtime.application.exceptions import EnvelopeDecodeError, ForbiddenError
from itas_realtime.config import settings
from itas_realtime.domain.envelope import Envelope
from itas_realtime.infrastructure.ws.protocol import decode_envelope, encode_envelope
from itas_realtime.relay.auth import Principal, get_verifier
from itas_realtime.relay.manager import ConnectionManager

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

AUTH_FAILED_CLOSE_CODE = 4001

manager = ConnectionManager()


def get_manager() -> ConnectionManager:
    return manager


def _authenticate(token: str | None) -> Principal | None:
    if not token:
        logger.debug("WS auth failed: no token")
        return None
    try:
        return get_verifier().verify(token)
    except ForbiddenError:
        logger.debug("WS auth failed", exc_info=True)
        return None


@router.websocket("/ws/notifications")
async def ws_notifications(
    websocket: WebSocket,
    token: str | None = Query(default=None),
) -> None:
    principal = _authenticate(token)
    if principal is None:
        await websocket.close(code=AUTH_FAILED_CLOSE_CODE, reason="Authentication failed")
        return

    pkey = principal.principal_key
    await manager.connect(websocket, principal)

    heartbeat_task = asyncio.create_task(
        _heartbeat(websocket), name=f"ws-heartbeat-{pkey}",
    )
    try:
        await _read_loop(websocket)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", pkey)
    finally:
        heartbeat_task.cancel()
        manager.disconnect(websocket, pkey)


async def _send(ws: WebSocket, event_type: str, data: object = None) -> None:
    await ws.send_text(encode_envelope(Envelope.create(event_type, data)))


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await _send(ws, "heartbeat")
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("WS heartbeat stopped", exc_info=True)


async def _read_loop(ws: WebSocket) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            envelope = decode_envelope(raw)
        except EnvelopeDecodeError:
            await _send(ws, "error", {"code": "invalid_payload"})
            continue

        if envelope.type == "ping":
            await _send(ws, "pong")
        else:
            await _send(ws, "error", {"code": "unknown_type", "type": envelope.type})
