"""Periodic refresh loop shared by the feed, message list, notification badge and profile views.

Each view owns one :class:`RefreshScheduler`. The scheduler arms a one-shot
timer, runs the view's refresh operation when the timer fires, and arms the
next timer only after that operation settles, so a slow refresh delays the
following one instead of overlapping it.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol

from .config import RefreshConfig
from .environment import EnvironmentChange, EnvironmentMonitor, environment_monitor
from .retry import effective_budget, environment_allows, evaluate_attempt, is_budget_exhausted

logger = logging.getLogger(__name__)

RefreshOperation = Callable[[], Any]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


CallLater = Callable[[float, Callable[[], None]], TimerHandle]


class RefreshState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    REFRESHING = "refreshing"
    SUSPENDED = "suspended"


@dataclass(slots=True)
class RefreshSession:
    """Mutable per-view state; only the owning scheduler writes to it."""

    status: RefreshState = RefreshState.IDLE
    last_refresh_at: datetime | None = None
    consecutive_failures: int = 0
    last_error: str | None = None
    visible: bool = True
    online: bool = True


@dataclass(frozen=True, slots=True)
class RefreshStatus:
    """Read-only snapshot handed to views, plus the manual refresh entry point."""

    state: RefreshState
    is_refreshing: bool
    last_refresh: datetime | None
    error: str | None
    retry_count: int
    is_enabled: bool
    is_visible: bool
    is_online: bool
    interval_ms: int
    max_retries: int
    manual_refresh: Callable[[], Awaitable[None]] = field(repr=False, compare=False)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class RefreshScheduler:
    """Timer, mutual exclusion and retry discipline for one view's refresh operation."""

    def __init__(
        self,
        monitor: EnvironmentMonitor | None = None,
        *,
        name: str = "refresh",
        call_later: CallLater | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.name = name
        self._monitor = monitor or environment_monitor
        self._call_later = call_later
        self._clock = clock or _utcnow
        self._config: RefreshConfig | None = None
        self._operation: RefreshOperation | None = None
        self._session = RefreshSession(visible=self._monitor.visible, online=self._monitor.online)
        self._timer: TimerHandle | None = None
        self._in_flight = False
        self._active = False
        # Bumped by stop(); completions from an older epoch must not touch the session.
        self._epoch = 0
        self._unsubscribe: Callable[[], None] | None = None
        self._tasks: set[asyncio.Future[Any]] = set()
        self._running_task: asyncio.Task[Any] | None = None

    @property
    def session(self) -> RefreshSession:
        return self._session

    @property
    def config(self) -> RefreshConfig | None:
        return self._config

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    def start(self, config: RefreshConfig, operation: RefreshOperation) -> None:
        """Replace the configuration and operation, then (re)arm the schedule."""

        self._cancel_timer()
        if config != self._config:
            self._session.consecutive_failures = 0
            self._session.last_error = None
        self._config = config
        self._operation = operation
        self._active = True

        if self._unsubscribe is None:
            self._unsubscribe = self._monitor.subscribe(self._on_environment_change)
        self._session.visible = self._monitor.visible
        self._session.online = self._monitor.online

        if self._in_flight:
            # The running operation arms the next timer under the new config when it settles.
            self._session.status = RefreshState.REFRESHING
            return

        if not config.schedulable:
            logger.debug("Refresh %s not armed (enabled=%s, interval_ms=%d)", self.name, config.enabled, config.interval_ms)
        self._settle()

    def stop(self) -> None:
        """Cancel the timer and pending ticks, detach from the environment and drop the session.

        A refresh already in flight is left to finish; its result is discarded.
        Safe to call repeatedly.
        """

        self._cancel_timer()
        for task in list(self._tasks):
            if task is not self._running_task:
                task.cancel()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._epoch += 1
        self._active = False
        self._session = RefreshSession(visible=self._monitor.visible, online=self._monitor.online)

    async def trigger_manual(self) -> None:
        """Run the operation now, bypassing the timer and the retry budget."""

        if not self._active or self._operation is None:
            return
        if self._in_flight:
            logger.debug("Manual refresh for %s ignored; refresh already in flight", self.name)
            return
        self._cancel_timer()
        await self._run()

    async def tick(self) -> None:
        """Timer entry point; skips without touching state when an attempt is not allowed."""

        if not self._active or self._operation is None or self._config is None:
            return
        if self._in_flight:
            return
        decision = evaluate_attempt(self._session, self._config)
        if not decision.should_run:
            logger.debug("Refresh %s skipped: %s", self.name, decision.reason)
            return
        self._cancel_timer()
        await self._run()

    def status(self) -> RefreshStatus:
        config = self._config
        session = self._session
        return RefreshStatus(
            state=session.status,
            is_refreshing=session.status is RefreshState.REFRESHING,
            last_refresh=session.last_refresh_at,
            error=session.last_error,
            retry_count=session.consecutive_failures,
            is_enabled=bool(config and config.enabled and self._active),
            is_visible=session.visible,
            is_online=session.online,
            interval_ms=config.interval_ms if config else 0,
            max_retries=config.max_retries if config else 0,
            manual_refresh=self.trigger_manual,
        )

    async def _run(self) -> None:
        epoch = self._epoch
        operation = self._operation
        assert operation is not None
        self._in_flight = True
        self._running_task = asyncio.current_task()
        self._session.status = RefreshState.REFRESHING
        try:
            result = operation()
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            if epoch == self._epoch:
                self._record_failure(exc)
            else:
                logger.debug("Discarding failed refresh for %s after teardown", self.name)
        else:
            if epoch == self._epoch:
                self._record_success()
        finally:
            self._in_flight = False
            self._running_task = None
            if self._active:
                self._settle()

    def _record_success(self) -> None:
        session = self._session
        session.last_refresh_at = self._clock()
        session.consecutive_failures = 0
        session.last_error = None

    def _record_failure(self, exc: Exception) -> None:
        session = self._session
        session.consecutive_failures += 1
        session.last_error = _describe(exc)
        budget = effective_budget(self._config.max_retries) if self._config else 1
        logger.warning(
            "Refresh %s failed (%d/%d consecutive): %s",
            self.name,
            session.consecutive_failures,
            budget,
            session.last_error,
        )

    def _settle(self) -> None:
        config = self._config
        session = self._session
        if not self._active or config is None or not config.schedulable:
            session.status = RefreshState.IDLE
            return
        if is_budget_exhausted(session.consecutive_failures, config.max_retries):
            if session.status is not RefreshState.SUSPENDED:
                logger.info(
                    "Refresh %s suspended after %d consecutive failures",
                    self.name,
                    session.consecutive_failures,
                )
            session.status = RefreshState.SUSPENDED
            return
        session.status = RefreshState.SCHEDULED
        self._arm()

    def _arm(self) -> None:
        self._cancel_timer()
        config = self._config
        if config is None or not environment_allows(self._session, config):
            # Dormant: the environment monitor resumes the cadence.
            return
        call_later = self._call_later or asyncio.get_running_loop().call_later
        self._timer = call_later(config.interval_seconds, self._on_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        self._spawn(self.tick())

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_environment_change(self, change: EnvironmentChange) -> None:
        session = self._session
        config = self._config
        if change.signal == "visible":
            session.visible = change.value
            pauses = bool(config and config.pause_on_hidden)
        else:
            session.online = change.value
            pauses = bool(config and config.pause_on_offline)

        if not self._active or not pauses:
            return
        if change.value:
            # Catch up immediately; the tick re-arms the timer when it settles.
            self._spawn(self.tick())
        else:
            self._cancel_timer()


__all__ = [
    "CallLater",
    "RefreshOperation",
    "RefreshScheduler",
    "RefreshSession",
    "RefreshState",
    "RefreshStatus",
    "TimerHandle",
]
