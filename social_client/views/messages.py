"""Message thread for the currently opened conversation."""
from __future__ import annotations

from typing import Any

from ..clients import BackendClient
from ..constants import MESSAGES_VIEW
from .base import RefreshingView


class MessagesView(RefreshingView):
    view_key = MESSAGES_VIEW

    def __init__(self, client: BackendClient, *, conversation_id: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._client = client
        self.conversation_id = conversation_id
        self.messages: list[dict[str, Any]] = []

    async def refresh(self) -> None:
        conversation_id = self.conversation_id
        if not conversation_id:
            return
        messages = await self._client.list_messages(conversation_id)
        # The user may have switched threads while the request was in flight.
        if conversation_id == self.conversation_id:
            self.messages = messages

    async def open_conversation(self, conversation_id: str) -> None:
        if conversation_id == self.conversation_id:
            return
        self.conversation_id = conversation_id
        self.messages = []
        await self.manual_refresh()


__all__ = ["MessagesView"]
