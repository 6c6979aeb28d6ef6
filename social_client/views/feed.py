"""Post feed kept fresh by the auto-refresh scheduler."""
from __future__ import annotations

from typing import Any

from ..clients import BackendClient
from ..constants import FEED_VIEW
from .base import RefreshingView


class FeedView(RefreshingView):
    view_key = FEED_VIEW

    def __init__(self, client: BackendClient, *, limit: int = 50, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._client = client
        self.limit = limit
        self.posts: list[dict[str, Any]] = []

    async def refresh(self) -> None:
        self.posts = await self._client.list_feed(limit=self.limit)


__all__ = ["FeedView"]
