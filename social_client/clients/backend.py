from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import get_settings

logger = logging.getLogger(__name__)


class BackendClientError(RuntimeError):
    """Raised when the hosted backend cannot satisfy a query."""


def _expect_list(data: Any, resource: str) -> list[dict[str, Any]]:
    if not isinstance(data, list):
        raise BackendClientError(f"Unexpected {resource} payload from backend")
    return [item for item in data if isinstance(item, dict)]


class BackendClient:
    """Thin async wrapper over the hosted backend's REST query API."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.backend_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.backend_api_key
        self._timeout = float(timeout or settings.backend_timeout or 15.0)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["apikey"] = self._api_key
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers(),
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        client = self._get_client()
        try:
            response = await client.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.warning("Backend %s %s returned %d", method, path, status_code)
            raise BackendClientError(f"Backend returned {status_code} for {path}") from exc
        except httpx.HTTPError as exc:
            logger.warning("Backend %s %s failed: %s", method, path, exc)
            raise BackendClientError(f"Backend unreachable ({exc.__class__.__name__})") from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendClientError(f"Invalid JSON returned for {path}") from exc

    async def list_feed(self, *, limit: int = 50) -> list[dict[str, Any]]:
        data = await self._request(
            "GET",
            "/rest/v1/posts",
            params={"select": "*", "order": "created_at.desc", "limit": str(limit)},
        )
        return _expect_list(data, "posts")

    async def list_messages(self, conversation_id: str, *, limit: int = 100) -> list[dict[str, Any]]:
        data = await self._request(
            "GET",
            "/rest/v1/messages",
            params={
                "select": "*",
                "conversation_id": f"eq.{conversation_id}",
                "order": "created_at.asc",
                "limit": str(limit),
            },
        )
        return _expect_list(data, "messages")

    async def count_unread_notifications(self, user_id: str) -> int:
        data = await self._request(
            "GET",
            "/rest/v1/notifications",
            params={"select": "id", "user_id": f"eq.{user_id}", "read": "eq.false"},
        )
        return len(_expect_list(data, "notifications"))

    async def mark_notifications_read(self, user_id: str) -> None:
        await self._request(
            "PATCH",
            "/rest/v1/notifications",
            params={"user_id": f"eq.{user_id}", "read": "eq.false"},
            json={"read": True},
        )

    async def get_profile(self, user_id: str) -> dict[str, Any] | None:
        data = await self._request(
            "GET",
            "/rest/v1/profiles",
            params={"select": "*", "id": f"eq.{user_id}", "limit": "1"},
        )
        rows = _expect_list(data, "profiles")
        return rows[0] if rows else None

    async def list_user_posts(self, user_id: str, *, limit: int = 50) -> list[dict[str, Any]]:
        data = await self._request(
            "GET",
            "/rest/v1/posts",
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "order": "created_at.desc",
                "limit": str(limit),
            },
        )
        return _expect_list(data, "posts")


__all__ = ["BackendClient", "BackendClientError"]
