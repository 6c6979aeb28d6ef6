"""Schemas backing the auto-refresh settings and status API."""
from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..constants import DEFAULT_MAX_RETRIES, DEFAULT_REFRESH_INTERVAL_MS


class RefreshSettings(BaseModel):
    """Flat, persisted auto-refresh record shared by every view.

    Records written by the web client use camelCase keys, so both spellings
    are accepted on input. Output always uses the snake_case field names.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    enabled: bool = True
    interval: int = Field(
        default=DEFAULT_REFRESH_INTERVAL_MS,
        validation_alias=AliasChoices("interval", "interval_ms", "intervalMs"),
    )
    pause_on_visibility_change: bool = Field(
        default=True,
        validation_alias=AliasChoices("pause_on_visibility_change", "pauseOnVisibilityChange"),
    )
    pause_on_offline: bool = Field(
        default=True,
        validation_alias=AliasChoices("pause_on_offline", "pauseOnOffline"),
    )
    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES,
        ge=0,
        validation_alias=AliasChoices("max_retries", "maxRetries"),
    )
    feed_enabled: bool = Field(default=True, validation_alias=AliasChoices("feed_enabled", "feedEnabled"))
    messages_enabled: bool = Field(default=True, validation_alias=AliasChoices("messages_enabled", "messagesEnabled"))
    profile_enabled: bool = Field(default=True, validation_alias=AliasChoices("profile_enabled", "profileEnabled"))
    notifications_enabled: bool = Field(
        default=True,
        validation_alias=AliasChoices("notifications_enabled", "notificationsEnabled"),
    )

    def view_enabled(self, view_key: str) -> bool:
        return bool(getattr(self, f"{view_key}_enabled", True))


class RefreshSettingsUpdate(BaseModel):
    """Partial update in either key spelling; unknown keys are kept so the store can reject them by name."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    enabled: bool | None = None
    interval: int | None = Field(default=None, validation_alias=AliasChoices("interval", "interval_ms", "intervalMs"))
    pause_on_visibility_change: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("pause_on_visibility_change", "pauseOnVisibilityChange"),
    )
    pause_on_offline: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("pause_on_offline", "pauseOnOffline"),
    )
    max_retries: int | None = Field(default=None, validation_alias=AliasChoices("max_retries", "maxRetries"))
    feed_enabled: bool | None = Field(default=None, validation_alias=AliasChoices("feed_enabled", "feedEnabled"))
    messages_enabled: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("messages_enabled", "messagesEnabled"),
    )
    profile_enabled: bool | None = Field(default=None, validation_alias=AliasChoices("profile_enabled", "profileEnabled"))
    notifications_enabled: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("notifications_enabled", "notificationsEnabled"),
    )


class EnvironmentUpdate(BaseModel):
    visible: bool | None = None
    online: bool | None = None


class EnvironmentResponse(BaseModel):
    visible: bool
    online: bool


class RefreshStatusResponse(BaseModel):
    view: str
    state: str
    is_refreshing: bool
    last_refresh: datetime | None = None
    error: str | None = None
    retry_count: int = 0
    is_enabled: bool
    is_visible: bool
    is_online: bool
    interval_ms: int
    max_retries: int


class RefreshStatusListResponse(BaseModel):
    items: list[RefreshStatusResponse]


__all__ = [
    "RefreshSettings",
    "RefreshSettingsUpdate",
    "EnvironmentUpdate",
    "EnvironmentResponse",
    "RefreshStatusResponse",
    "RefreshStatusListResponse",
]
