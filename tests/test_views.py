"""Views wired to the settings store, environment monitor and their schedulers."""
from __future__ import annotations

import asyncio
from typing import Any

import pytest

from social_client.clients import BackendClientError
from social_client.config import Settings
from social_client.database import SessionLocal
from social_client.refresh import EnvironmentMonitor, RefreshScheduler, RefreshState, ViewOverrides
from social_client.services import RefreshSettingsStore
from social_client.views import (
    FeedView,
    MessagesView,
    NotificationBadgeView,
    ProfileView,
    ViewRegistry,
    build_default_views,
)

from .support import ManualTimers, drain


class FakeBackend:
    """Records calls and serves canned rows in place of the hosted backend."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.fail_with: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.posts: list[dict[str, Any]] = [{"id": 1, "content": "first"}]
        self.unread = 4

    async def _serve(self, name: str, arg: Any = None) -> None:
        self.calls.append((name, arg))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    async def list_feed(self, *, limit: int = 50) -> list[dict[str, Any]]:
        await self._serve("list_feed", limit)
        return list(self.posts)

    async def list_messages(self, conversation_id: str, *, limit: int = 100) -> list[dict[str, Any]]:
        await self._serve("list_messages", conversation_id)
        return [{"id": f"{conversation_id}-1", "conversation_id": conversation_id}]

    async def count_unread_notifications(self, user_id: str) -> int:
        await self._serve("count_unread_notifications", user_id)
        return self.unread

    async def mark_notifications_read(self, user_id: str) -> None:
        await self._serve("mark_notifications_read", user_id)
        self.unread = 0

    async def get_profile(self, user_id: str) -> dict[str, Any] | None:
        await self._serve("get_profile", user_id)
        return {"id": user_id, "username": "sam"}

    async def list_user_posts(self, user_id: str, *, limit: int = 50) -> list[dict[str, Any]]:
        await self._serve("list_user_posts", user_id)
        return [{"id": 9, "user_id": user_id}]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store() -> RefreshSettingsStore:
    return RefreshSettingsStore(SessionLocal)


def _view_kwargs(store: RefreshSettingsStore, monitor: EnvironmentMonitor, scheduler: RefreshScheduler) -> dict[str, Any]:
    return {"store": store, "monitor": monitor, "scheduler": scheduler}


@pytest.mark.asyncio
async def test_feed_mount_loads_posts_and_schedules_next_refresh(
    backend: FakeBackend,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
    scheduler: RefreshScheduler,
    timers: ManualTimers,
) -> None:
    view = FeedView(backend, limit=20, **_view_kwargs(store, monitor, scheduler))

    await view.mount()

    assert view.posts == [{"id": 1, "content": "first"}]
    assert backend.calls == [("list_feed", 20)]
    status = view.status()
    assert status.state is RefreshState.SCHEDULED
    assert status.last_refresh is not None
    assert timers.next_due == pytest.approx(30.0)

    backend.posts.append({"id": 2, "content": "second"})
    await timers.advance(30)

    assert len(view.posts) == 2


@pytest.mark.asyncio
async def test_settings_change_restarts_schedule_with_merged_config(
    backend: FakeBackend,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
    scheduler: RefreshScheduler,
    timers: ManualTimers,
) -> None:
    view = FeedView(backend, **_view_kwargs(store, monitor, scheduler))
    await view.mount(initial_refresh=False)

    store.update(interval=10_000)

    assert view.status().interval_ms == 10_000
    assert timers.next_due == pytest.approx(10.0)

    store.update(feed_enabled=False)

    status = view.status()
    assert status.state is RefreshState.IDLE
    assert status.is_enabled is False
    assert timers.pending == []


@pytest.mark.asyncio
async def test_overrides_can_disable_a_single_view(
    backend: FakeBackend,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
    scheduler: RefreshScheduler,
    timers: ManualTimers,
) -> None:
    view = FeedView(backend, **_view_kwargs(store, monitor, scheduler))
    await view.mount(initial_refresh=False)

    view.set_overrides(ViewOverrides(interval_ms=5_000))
    assert timers.next_due == pytest.approx(5.0)

    view.set_overrides(ViewOverrides(enabled=False))
    assert view.status().state is RefreshState.IDLE
    assert timers.pending == []


@pytest.mark.asyncio
async def test_backend_error_surfaces_on_status(
    backend: FakeBackend,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
    scheduler: RefreshScheduler,
) -> None:
    backend.fail_with = BackendClientError("Backend returned 503 for /rest/v1/posts")
    view = FeedView(backend, **_view_kwargs(store, monitor, scheduler))

    await view.mount()

    status = view.status()
    assert status.error == "Backend returned 503 for /rest/v1/posts"
    assert status.retry_count == 1
    assert status.state is RefreshState.SCHEDULED
    assert view.posts == []


@pytest.mark.asyncio
async def test_unmount_stops_schedule_and_ignores_later_settings(
    backend: FakeBackend,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
    scheduler: RefreshScheduler,
    timers: ManualTimers,
) -> None:
    view = FeedView(backend, **_view_kwargs(store, monitor, scheduler))
    await view.mount()

    view.unmount()
    store.update(interval=5_000)
    await timers.advance(60)

    assert view.mounted is False
    assert view.status().state is RefreshState.IDLE
    assert timers.pending == []
    assert monitor.listener_count == 0
    assert len(backend.calls) == 1


@pytest.mark.asyncio
async def test_remote_change_reuses_manual_path_without_overlap(
    backend: FakeBackend,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
    scheduler: RefreshScheduler,
) -> None:
    view = FeedView(backend, **_view_kwargs(store, monitor, scheduler))
    await view.mount(initial_refresh=False)
    backend.gate = asyncio.Event()

    first = asyncio.create_task(view.notify_remote_change({"event": "INSERT"}))
    await drain()
    await view.notify_remote_change({"event": "INSERT"})
    backend.gate.set()
    await first

    assert backend.calls == [("list_feed", 50)]


@pytest.mark.asyncio
async def test_messages_view_follows_opened_conversation(
    backend: FakeBackend,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
    scheduler: RefreshScheduler,
) -> None:
    view = MessagesView(backend, **_view_kwargs(store, monitor, scheduler))
    await view.mount()

    assert backend.calls == []
    assert view.status().error is None

    await view.open_conversation("conv-1")

    assert view.messages == [{"id": "conv-1-1", "conversation_id": "conv-1"}]
    assert backend.calls == [("list_messages", "conv-1")]


@pytest.mark.asyncio
async def test_messages_from_a_previous_conversation_are_discarded(
    backend: FakeBackend,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
    scheduler: RefreshScheduler,
) -> None:
    view = MessagesView(backend, conversation_id="conv-1", **_view_kwargs(store, monitor, scheduler))
    await view.mount(initial_refresh=False)
    backend.gate = asyncio.Event()

    pending = asyncio.create_task(view.manual_refresh())
    await drain()
    view.conversation_id = "conv-2"
    backend.gate.set()
    await pending

    assert view.messages == []


@pytest.mark.asyncio
async def test_notification_badge_counts_and_clears(
    backend: FakeBackend,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
    scheduler: RefreshScheduler,
) -> None:
    view = NotificationBadgeView(backend, user_id="user-1", **_view_kwargs(store, monitor, scheduler))
    await view.mount()

    assert view.unread_count == 4

    await view.mark_all_read()

    assert view.unread_count == 0
    assert ("mark_notifications_read", "user-1") in backend.calls


@pytest.mark.asyncio
async def test_profile_view_loads_header_and_posts(
    backend: FakeBackend,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
    scheduler: RefreshScheduler,
) -> None:
    view = ProfileView(backend, user_id="user-1", **_view_kwargs(store, monitor, scheduler))
    await view.mount()

    assert view.profile == {"id": "user-1", "username": "sam"}
    assert view.posts == [{"id": 9, "user_id": "user-1"}]


@pytest.mark.asyncio
async def test_hidden_app_pauses_view_until_visible_again(
    backend: FakeBackend,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
    scheduler: RefreshScheduler,
    timers: ManualTimers,
) -> None:
    view = FeedView(backend, **_view_kwargs(store, monitor, scheduler))
    await view.mount()

    monitor.set_visible(False)
    await timers.advance(90)
    assert len(backend.calls) == 1

    monitor.set_visible(True)
    await drain()

    assert len(backend.calls) == 2
    assert timers.next_due == pytest.approx(120.0)


def test_registry_rejects_duplicate_keys(backend: FakeBackend, store: RefreshSettingsStore, monitor: EnvironmentMonitor) -> None:
    registry = ViewRegistry()
    registry.register(FeedView(backend, store=store, monitor=monitor))

    with pytest.raises(ValueError, match="already registered"):
        registry.register(FeedView(backend, store=store, monitor=monitor))

    assert "feed" in registry
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_default_views_mount_refresh_and_unmount_together(
    backend: FakeBackend, store: RefreshSettingsStore, monitor: EnvironmentMonitor
) -> None:
    settings = Settings(BACKEND_USER_ID="user-1", DEFAULT_CONVERSATION_ID="conv-1")
    registry = build_default_views(backend, settings=settings, store=store, monitor=monitor)

    await registry.mount_all(initial_refresh=False)
    await registry.refresh_all()

    assert [key for key, _ in registry.statuses()] == ["feed", "messages", "notifications", "profile"]
    assert all(status.last_refresh is not None for _, status in registry.statuses())
    assert {name for name, _ in backend.calls} == {
        "list_feed",
        "list_messages",
        "count_unread_notifications",
        "get_profile",
        "list_user_posts",
    }

    registry.unmount_all()

    assert all(status.state is RefreshState.IDLE for _, status in registry.statuses())
    assert monitor.listener_count == 0


@pytest.mark.asyncio
async def test_remount_starts_from_a_fresh_session(
    backend: FakeBackend,
    store: RefreshSettingsStore,
    monitor: EnvironmentMonitor,
    scheduler: RefreshScheduler,
    timers: ManualTimers,
) -> None:
    backend.fail_with = BackendClientError("Backend unreachable (ConnectError)")
    view = FeedView(backend, overrides=ViewOverrides(max_retries=1), **_view_kwargs(store, monitor, scheduler))
    await view.mount()
    assert view.status().state is RefreshState.SUSPENDED

    view.unmount()
    backend.fail_with = None
    await timers.advance(30)
    await view.mount(initial_refresh=False)

    status = view.status()
    assert status.state is RefreshState.SCHEDULED
    assert status.retry_count == 0
    assert status.error is None
    assert status.last_refresh is None
    assert timers.next_due == pytest.approx(60.0)
