"""HTTP client for the portal's notification resources."""
from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from itas_realtime.application.exceptions import ApiError, ForbiddenError, NotFoundError
from itas_realtime.application.ports.credentials import TokenProvider
from itas_realtime.domain.entities.notification import Notification

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class NotificationsApi:
    """Thin async wrapper over ``/notifications`` endpoints.

    The bearer token is read from ``token_provider`` on every request.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token_provider: TokenProvider | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> NotificationsApi:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- reads --

    async def get_all(self) -> list[Notification]:
        return _parse_list(await self._request("GET", "/notifications"))

    async def get_unread(self, role: str | None = None) -> list[Notification]:
        return _parse_list(await self._request("GET", "/notifications/unread", params=_role(role)))

    async def get_unread_count(self, role: str | None = None) -> int:
        data = await self._request("GET", "/notifications/count", params=_role(role))
        if data is None:
            return 0
        if isinstance(data, bool) or not isinstance(data, (int, str)):
            raise ApiError(f"unexpected unread count: {data!r}")
        try:
            return int(data)
        except ValueError as exc:
            raise ApiError(f"unexpected unread count: {data!r}") from exc

    async def get_by_role(self, role: str) -> list[Notification]:
        return _parse_list(await self._request("GET", f"/notifications/by-role/{role}"))

    async def get_campaign_stats(self) -> dict[str, Any]:
        return await self._request("GET", "/notifications/campaigns/stats") or {}

    # -- writes --

    async def mark_as_read(self, notification_id: int) -> Any:
        return await self._request("POST", f"/notifications/mark-as-read/{notification_id}", json={})

    async def mark_all_as_read(self, role: str | None = None) -> Any:
        return await self._request("POST", "/notifications/mark-all-read", params=_role(role), json={})

    async def send(self, notification: dict[str, Any]) -> Any:
        return await self._request("POST", "/notifications/send", json=notification)

    async def update(self, notification_id: int, notification: dict[str, Any]) -> Any:
        return await self._request("PUT", f"/notifications/{notification_id}", json=notification)

    async def delete(self, notification_id: int) -> Any:
        return await self._request("DELETE", f"/notifications/{notification_id}")

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        headers = {"Content-Type": "application/json"}
        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self._base_url}{path}"
        try:
            resp = await self._client.request(method, url, params=params, json=json, headers=headers)
        except httpx.TimeoutException as exc:
            raise ApiError(f"{method} {path} timed out") from exc
        except httpx.RequestError as exc:
            raise ApiError(f"{method} {path} failed: {exc}") from exc

        if resp.status_code in (401, 403):
            raise ForbiddenError(f"{method} {path}: {resp.status_code}")
        if resp.status_code == 404:
            raise NotFoundError(f"{method} {path}: not found")
        if resp.is_error:
            raise ApiError(f"{method} {path}: {resp.status_code}", status_code=resp.status_code)

        if not resp.content:
            return None
        try:
            body = resp.json()
        except ValueError:
            logger.debug("Non-JSON body from %s %s", method, path)
            return resp.text
        return _unwrap(body)


def _role(role: str | None) -> dict[str, str] | None:
    return {"role": role} if role else None


def _unwrap(body: Any) -> Any:
    """Backend bodies are ``{"message": ..., "data": ...}``; bare payloads pass through."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def _parse_list(data: Any) -> list[Notification]:
    if not data:
        return []
    if not isinstance(data, list):
        raise ApiError(f"expected a list of notifications, got {type(data).__name__}")
    try:
        return [Notification.model_validate(item) for item in data]
    except PydanticValidationError as exc:
        raise ApiError(f"malformed notification: {exc.error_count()} error(s)") from exc
