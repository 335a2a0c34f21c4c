"""In-process registry of relay WebSocket sessions."""
from __future__ import annotations

import logging

from fastapi import WebSocket

from itas_realtime.domain.envelope import Envelope
from itas_realtime.infrastructure.bus.serializer import Broadcast
from itas_realtime.infrastructure.ws.protocol import encode_envelope
from itas_realtime.relay.auth import Principal

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks WebSocket connections per principal and per role."""

    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = {}
        self._roles: dict[str, set[str]] = {}

    @property
    def connection_count(self) -> int:
        return sum(len(conns) for conns in self._connections.values())

    async def connect(self, ws: WebSocket, principal: Principal) -> None:
        await ws.accept()
        pkey = principal.principal_key
        self._connections.setdefault(pkey, set()).add(ws)
        if principal.role:
            self._roles.setdefault(principal.role, set()).add(pkey)
        logger.debug("WS connected: %s (total=%d)", pkey, self.connection_count)

    def disconnect(self, ws: WebSocket, principal_key: str) -> None:
        conns = self._connections.get(principal_key)
        if conns:
            conns.discard(ws)
            if not conns:
                del self._connections[principal_key]
                for members in self._roles.values():
                    members.discard(principal_key)
        logger.debug("WS disconnected: %s", principal_key)

    async def dispatch(self, broadcast: Broadcast) -> int:
        """Route one published envelope; returns the number of sockets reached."""
        if broadcast.user_id is not None:
            keys = [k for k in self._connections if k.rsplit(":", 1)[-1] == broadcast.user_id]
            if broadcast.role:
                keys = [k for k in keys if k == f"{broadcast.role}:{broadcast.user_id}"]
        elif broadcast.role:
            keys = list(self._roles.get(broadcast.role, set()))
        else:
            keys = list(self._connections)
        sent = 0
        for pkey in keys:
            sent += await self.send_to_principal(pkey, broadcast.envelope)
        return sent

    async def send_to_principal(self, principal_key: str, envelope: Envelope) -> int:
        raw = encode_envelope(envelope)
        dead: list[WebSocket] = []
        sent = 0
        for ws in list(self._connections.get(principal_key, set())):
            try:
                await ws.send_text(raw)
                sent += 1
            except Exception:
                dead.append(ws)
        for ws in dead:
            self.disconnect(ws, principal_key)
        return sent
