"""Bearer-token verification for sessions dialing the relay."""
from __future__ import annotations

from dataclasses import dataclass, field

import jwt

from itas_realtime.application.exceptions import ForbiddenError
from itas_realtime.config import settings


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated session identity extracted from the JWT."""

    subject_id: str
    role: str | None = None
    roles: list[str] = field(default_factory=list)

    @property
    def principal_key(self) -> str:
        """Unique key for the connection registry."""
        return f"{self.role or 'anonymous'}:{self.subject_id}"


class HS256Verifier:
    """Verify JWTs signed with a shared HS256 secret."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    def verify(self, token: str) -> Principal:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.PyJWTError as exc:
            raise ForbiddenError(str(exc)) from exc
        if "sub" not in payload:
            raise ForbiddenError("token has no subject")
        roles = payload.get("roles", [])
        role = payload.get("role") or (roles[0] if roles else None)
        return Principal(subject_id=str(payload["sub"]), role=role, roles=list(roles))


_verifier: HS256Verifier | None = None


def get_verifier() -> HS256Verifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)
    return _verifier
