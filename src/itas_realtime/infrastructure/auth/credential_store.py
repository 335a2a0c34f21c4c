"""Persistent session credentials, stored under fixed keys."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

TOKEN_KEY = "itas_token"
USER_KEY = "itas_user"


class InMemoryCredentialStore:
    def __init__(self, token: str | None = None, user: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = {}
        if token:
            self.save(token, user)

    def get_token(self) -> str | None:
        return self._data.get(TOKEN_KEY)

    def get_user(self) -> dict[str, Any] | None:
        return self._data.get(USER_KEY)

    def save(self, token: str, user: dict[str, Any] | None = None) -> None:
        self._data = {TOKEN_KEY: token, USER_KEY: user}

    def clear(self) -> None:
        self._data = {}


class FileCredentialStore:
    """JSON file holding ``{"itas_token": ..., "itas_user": ...}``.

    A missing or unreadable file reads as signed out. Every read goes to disk,
    so a token written by another process is picked up on the next dial.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def get_token(self) -> str | None:
        token = self._load().get(TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    def get_user(self) -> dict[str, Any] | None:
        user = self._load().get(USER_KEY)
        return user if isinstance(user, dict) else None

    def save(self, token: str, user: dict[str, Any] | None = None) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps({TOKEN_KEY: token, USER_KEY: user}))

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)

    def _load(self) -> dict[str, Any]:
        try:
            data = json.loads(self._path.read_text())
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable credential file %s", self._path)
            return {}
        return data if isinstance(data, dict) else {}
