"""Profile header and the profile owner's posts."""
from __future__ import annotations

import asyncio
from typing import Any

from ..clients import BackendClient
from ..constants import PROFILE_VIEW
from .base import RefreshingView


class ProfileView(RefreshingView):
    view_key = PROFILE_VIEW

    def __init__(self, client: BackendClient, *, user_id: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._client = client
        self.user_id = user_id
        self.profile: dict[str, Any] | None = None
        self.posts: list[dict[str, Any]] = []

    async def refresh(self) -> None:
        if not self.user_id:
            return
        profile, posts = await asyncio.gather(
            self._client.get_profile(self.user_id),
            self._client.list_user_posts(self.user_id),
        )
        self.profile = profile
        self.posts = posts


__all__ = ["ProfileView"]
