"""Effective schedule parameters merged from global and per-view settings."""

from __future__ import annotations

from dataclasses import dataclass

from ..constants import DEFAULT_MAX_RETRIES, DEFAULT_REFRESH_INTERVAL_MS
from ..schemas import RefreshSettings


@dataclass(frozen=True, slots=True)
class RefreshConfig:
    interval_ms: int = DEFAULT_REFRESH_INTERVAL_MS
    enabled: bool = True
    pause_on_hidden: bool = True
    pause_on_offline: bool = True
    max_retries: int = DEFAULT_MAX_RETRIES

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000

    @property
    def schedulable(self) -> bool:
        """True when the automatic timer may be armed at all."""

        return self.enabled and self.interval_ms > 0


@dataclass(frozen=True, slots=True)
class ViewOverrides:
    """Per-view values; ``None`` falls back to the global settings."""

    enabled: bool = True
    interval_ms: int | None = None
    pause_on_hidden: bool | None = None
    pause_on_offline: bool | None = None
    max_retries: int | None = None


def _pick(override, default):
    return default if override is None else override


def merge_refresh_config(
    settings: RefreshSettings,
    view_key: str,
    overrides: ViewOverrides | None = None,
) -> RefreshConfig:
    """Combine the global settings snapshot with one view's overrides."""

    overrides = overrides or ViewOverrides()
    return RefreshConfig(
        interval_ms=_pick(overrides.interval_ms, settings.interval),
        enabled=settings.enabled and settings.view_enabled(view_key) and overrides.enabled,
        pause_on_hidden=_pick(overrides.pause_on_hidden, settings.pause_on_visibility_change),
        pause_on_offline=_pick(overrides.pause_on_offline, settings.pause_on_offline),
        max_retries=_pick(overrides.max_retries, settings.max_retries),
    )


__all__ = ["RefreshConfig", "ViewOverrides", "merge_refresh_config"]
