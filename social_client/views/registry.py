"""Keeps track of mounted views so the API and shutdown hook can reach them."""
from __future__ import annotations

import asyncio
import logging
from typing import Iterator

from ..clients import BackendClient
from ..config import Settings
from ..refresh import EnvironmentMonitor, RefreshStatus
from ..services import RefreshSettingsStore
from .base import RefreshingView
from .feed import FeedView
from .messages import MessagesView
from .notifications import NotificationBadgeView
from .profile import ProfileView

logger = logging.getLogger(__name__)


class ViewRegistry:
    def __init__(self) -> None:
        self._views: dict[str, RefreshingView] = {}

    def __contains__(self, view_key: object) -> bool:
        return view_key in self._views

    def __iter__(self) -> Iterator[RefreshingView]:
        return iter(list(self._views.values()))

    def __len__(self) -> int:
        return len(self._views)

    def register(self, view: RefreshingView) -> RefreshingView:
        if not view.view_key:
            raise ValueError("View must declare a view_key")
        if view.view_key in self._views:
            raise ValueError(f"View '{view.view_key}' is already registered")
        self._views[view.view_key] = view
        return view

    def get(self, view_key: str) -> RefreshingView | None:
        return self._views.get(view_key)

    async def mount_all(self, *, initial_refresh: bool = True) -> None:
        for view in self:
            await view.mount(initial_refresh=initial_refresh)

    async def refresh_all(self) -> None:
        await asyncio.gather(*(view.manual_refresh() for view in self if view.mounted))

    def unmount_all(self) -> None:
        for view in self:
            view.unmount()

    def clear(self) -> None:
        self.unmount_all()
        self._views.clear()

    def statuses(self) -> list[tuple[str, RefreshStatus]]:
        return [(view.view_key, view.status()) for view in self]


def build_default_views(
    client: BackendClient,
    *,
    settings: Settings,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
) -> ViewRegistry:
    """Register the feed, messages, notification badge and profile views."""

    registry = ViewRegistry()
    shared = {"store": store, "monitor": monitor}
    registry.register(FeedView(client, **shared))
    registry.register(MessagesView(client, conversation_id=settings.default_conversation_id, **shared))
    registry.register(NotificationBadgeView(client, user_id=settings.backend_user_id, **shared))
    registry.register(ProfileView(client, user_id=settings.backend_user_id, **shared))
    if not settings.backend_user_id:
        logger.info("BACKEND_USER_ID not set; notification and profile views will stay empty")
    return registry


__all__ = ["ViewRegistry", "build_default_views"]
