"""Manual timer driver and a controllable refresh operation for scheduler tests."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


async def drain(rounds: int = 10) -> None:
    """Let spawned ticks and completed operations run to their next suspension point."""

    for _ in range(rounds):
        await asyncio.sleep(0)


@dataclass
class _Handle:
    due: float
    seq: int
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers:
    """Deterministic replacement for ``loop.call_later`` driven by :meth:`advance`."""

    def __init__(self) -> None:
        self.now = 0.0
        self._handles: list[_Handle] = []
        self._seq = 0

    def call_later(self, delay: float, callback: Callable[[], None]) -> _Handle:
        self._seq += 1
        handle = _Handle(self.now + delay, self._seq, callback)
        self._handles.append(handle)
        return handle

    def clock(self) -> datetime:
        return EPOCH + timedelta(seconds=self.now)

    @property
    def pending(self) -> list[_Handle]:
        return sorted((h for h in self._handles if not h.cancelled), key=lambda h: (h.due, h.seq))

    @property
    def next_due(self) -> float | None:
        pending = self.pending
        return pending[0].due if pending else None

    async def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.due <= target]
            if not due:
                break
            handle = due[0]
            self._handles.remove(handle)
            self.now = handle.due
            handle.callback()
            await drain()
        self.now = target


@dataclass
class FlakyOperation:
    """Refresh operation whose outcome and timing the test controls."""

    fail: bool = False
    message: str = "backend unavailable"
    gate: asyncio.Event | None = None
    calls: int = 0
    active: int = 0
    max_active: int = 0
    outcomes: list[str] = field(default_factory=list)

    async def __call__(self) -> None:
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.fail:
                self.outcomes.append("fail")
                raise RuntimeError(self.message)
            self.outcomes.append("ok")
        finally:
            self.active -= 1
