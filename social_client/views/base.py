"""Base class wiring a view's refresh operation into its own scheduler."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

from ..refresh import (
    EnvironmentMonitor,
    RefreshConfig,
    RefreshScheduler,
    RefreshStatus,
    ViewOverrides,
    environment_monitor,
    merge_refresh_config,
)
from ..schemas import RefreshSettings
from ..services import RefreshSettingsStore, refresh_settings_store

logger = logging.getLogger(__name__)


class RefreshingView(ABC):
    """A mounted screen that keeps its data fresh through a :class:`RefreshScheduler`.

    Settings changes never patch the running schedule: every change recomputes
    the merged config and hands it to ``scheduler.start`` again.
    """

    view_key: str = ""

    def __init__(
        self,
        *,
        store: RefreshSettingsStore | None = None,
        monitor: EnvironmentMonitor | None = None,
        overrides: ViewOverrides | None = None,
        scheduler: RefreshScheduler | None = None,
    ) -> None:
        self._store = store or refresh_settings_store
        self._monitor = monitor or environment_monitor
        self.overrides = overrides or ViewOverrides()
        self.scheduler = scheduler or RefreshScheduler(self._monitor, name=self.view_key)
        self._unsubscribe: Callable[[], None] | None = None
        self.mounted = False

    @abstractmethod
    async def refresh(self) -> None:
        """Fetch fresh data from the backend and apply it to the view."""

    def effective_config(self, settings: RefreshSettings | None = None) -> RefreshConfig:
        return merge_refresh_config(settings or self._store.snapshot(), self.view_key, self.overrides)

    async def mount(self, *, initial_refresh: bool = True) -> None:
        if self.mounted:
            return
        self.mounted = True
        self._unsubscribe = self._store.subscribe(self._on_settings_changed)
        self.scheduler.start(self.effective_config(), self.refresh)
        logger.debug("Mounted %s view", self.view_key)
        if initial_refresh:
            await self.scheduler.trigger_manual()

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.scheduler.stop()
        if self.mounted:
            logger.debug("Unmounted %s view", self.view_key)
        self.mounted = False

    def set_overrides(self, overrides: ViewOverrides) -> None:
        self.overrides = overrides
        if self.mounted:
            self.scheduler.start(self.effective_config(), self.refresh)

    async def manual_refresh(self) -> None:
        await self.scheduler.trigger_manual()

    async def notify_remote_change(self, payload: Any = None) -> None:
        """Realtime push hook: reuse the manual path so pushes never overlap a tick."""

        logger.debug("Remote change for %s view: %s", self.view_key, payload)
        await self.scheduler.trigger_manual()

    def status(self) -> RefreshStatus:
        return self.scheduler.status()

    def _on_settings_changed(self, settings: RefreshSettings) -> None:
        if not self.mounted:
            return
        self.scheduler.start(self.effective_config(settings), self.refresh)


__all__ = ["RefreshingView"]
