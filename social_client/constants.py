"""Project-wide constant values."""
from __future__ import annotations

AUTO_REFRESH_SETTINGS_KEY = "auto_refresh_settings"

DEFAULT_REFRESH_INTERVAL_MS = 30_000
DEFAULT_MAX_RETRIES = 3

FEED_VIEW = "feed"
MESSAGES_VIEW = "messages"
NOTIFICATIONS_VIEW = "notifications"
PROFILE_VIEW = "profile"

__all__ = [
    "AUTO_REFRESH_SETTINGS_KEY",
    "DEFAULT_REFRESH_INTERVAL_MS",
    "DEFAULT_MAX_RETRIES",
    "FEED_VIEW",
    "MESSAGES_VIEW",
    "NOTIFICATIONS_VIEW",
    "PROFILE_VIEW",
]
