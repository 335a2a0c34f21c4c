from __future__ import annotations

from typing import Any, Callable, Protocol

TokenProvider = Callable[[], "str | None"]


class CredentialStore(Protocol):
    def get_token(self) -> str | None: ...

    def get_user(self) -> dict[str, Any] | None: ...

    def save(self, token: str, user: dict[str, Any] | None = None) -> None: ...

    def clear(self) -> None: ...
