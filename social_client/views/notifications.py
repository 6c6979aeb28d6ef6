"""Unread-notification badge."""
from __future__ import annotations

from typing import Any

from ..clients import BackendClient
from ..constants import NOTIFICATIONS_VIEW
from .base import RefreshingView


class NotificationBadgeView(RefreshingView):
    view_key = NOTIFICATIONS_VIEW

    def __init__(self, client: BackendClient, *, user_id: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._client = client
        self.user_id = user_id
        self.unread_count = 0

    async def refresh(self) -> None:
        if not self.user_id:
            return
        self.unread_count = await self._client.count_unread_notifications(self.user_id)

    async def mark_all_read(self) -> None:
        if not self.user_id:
            return
        await self._client.mark_notifications_read(self.user_id)
        self.unread_count = 0


__all__ = ["NotificationBadgeView"]
