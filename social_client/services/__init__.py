"""Convenience exports for service layer."""
from .settings_store import (
    RefreshSettingsStore,
    SettingsPersistenceError,
    parse_settings,
    refresh_settings_store,
)

__all__ = [
    "RefreshSettingsStore",
    "SettingsPersistenceError",
    "parse_settings",
    "refresh_settings_store",
]
