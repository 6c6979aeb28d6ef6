"""Process-wide visibility/connectivity signals with observer fanout."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal

logger = logging.getLogger(__name__)

Signal = Literal["visible", "online"]


@dataclass(frozen=True, slots=True)
class EnvironmentChange:
    signal: Signal
    value: bool


EnvironmentListener = Callable[[EnvironmentChange], None]


class EnvironmentMonitor:
    """Tracks whether the app is foregrounded and online and notifies subscribers on transitions."""

    def __init__(self, *, visible: bool = True, online: bool = True) -> None:
        self._visible = visible
        self._online = online
        self._listeners: list[EnvironmentListener] = []

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def online(self) -> bool:
        return self._online

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: EnvironmentListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return _unsubscribe

    def set_visible(self, visible: bool) -> bool:
        """Record the visibility signal; return True when it changed."""

        visible = bool(visible)
        if visible == self._visible:
            return False
        self._visible = visible
        self._broadcast(EnvironmentChange("visible", visible))
        return True

    def set_online(self, online: bool) -> bool:
        """Record the connectivity signal; return True when it changed."""

        online = bool(online)
        if online == self._online:
            return False
        self._online = online
        self._broadcast(EnvironmentChange("online", online))
        return True

    def _broadcast(self, change: EnvironmentChange) -> None:
        logger.debug("Environment %s -> %s (%d listeners)", change.signal, change.value, len(self._listeners))
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Environment listener failed for %s change", change.signal)


environment_monitor = EnvironmentMonitor()


__all__ = ["EnvironmentChange", "EnvironmentListener", "EnvironmentMonitor", "environment_monitor"]
