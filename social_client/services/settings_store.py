"""Persisted auto-refresh settings with snapshot/replace semantics.

The settings live as a single JSON document in the ``client_settings`` key/value
table. Views never read the table directly: they take a snapshot from the
store when they (re)start and subscribe for replacements.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..constants import AUTO_REFRESH_SETTINGS_KEY
from ..database import create_session
from ..models import ClientSetting
from ..schemas import RefreshSettings

logger = logging.getLogger(__name__)

SettingsListener = Callable[[RefreshSettings], None]


class SettingsPersistenceError(RuntimeError):
    """Raised when the settings record cannot be written back."""


def parse_settings(raw: str | None) -> RefreshSettings:
    """Decode a stored record, falling back to defaults when it is missing or malformed."""

    if not raw:
        return RefreshSettings()
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Stored auto-refresh settings are not valid JSON; using defaults")
        return RefreshSettings()
    if not isinstance(data, dict):
        logger.warning("Stored auto-refresh settings are not an object; using defaults")
        return RefreshSettings()
    try:
        return RefreshSettings.model_validate(data)
    except ValidationError as exc:
        logger.warning("Stored auto-refresh settings failed validation; using defaults (%s)", exc.error_count())
        return RefreshSettings()


class RefreshSettingsStore:
    """Owns the process-wide settings snapshot and broadcasts replacements."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = create_session,
        *,
        key: str = AUTO_REFRESH_SETTINGS_KEY,
    ) -> None:
        self._session_factory = session_factory
        self._key = key
        self._settings = RefreshSettings()
        self._listeners: list[SettingsListener] = []

    def snapshot(self) -> RefreshSettings:
        return self._settings

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return _unsubscribe

    def load(self) -> RefreshSettings:
        """Read the persisted record; never raises."""

        raw: str | None = None
        try:
            with self._session_factory() as db:
                row = db.get(ClientSetting, self._key)
                if row is not None:
                    raw = row.value
        except SQLAlchemyError:
            logger.warning("Unable to read auto-refresh settings; using defaults", exc_info=True)
        self._replace(parse_settings(raw))
        return self._settings

    def update(self, **changes: Any) -> RefreshSettings:
        """Merge ``changes`` over the current snapshot, persist it and broadcast the result."""

        unknown = set(changes) - set(RefreshSettings.model_fields)
        if unknown:
            raise ValueError(f"Unknown auto-refresh settings: {', '.join(sorted(unknown))}")
        merged = self._settings.model_dump()
        merged.update({name: value for name, value in changes.items() if value is not None})
        try:
            updated = RefreshSettings.model_validate(merged)
        except ValidationError as exc:
            raise ValueError(str(exc)) from exc

        self._persist(updated)
        self._replace(updated)
        return updated

    def reset(self) -> RefreshSettings:
        defaults = RefreshSettings()
        self._persist(defaults)
        self._replace(defaults)
        return defaults

    def _persist(self, settings: RefreshSettings) -> None:
        payload = json.dumps(settings.model_dump())
        db = self._session_factory()
        try:
            instance = db.get(ClientSetting, self._key)
            if instance is None:
                db.add(ClientSetting(key=self._key, value=payload))
            else:
                instance.value = payload
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Failed to save auto-refresh settings")
            raise SettingsPersistenceError("Failed to save auto-refresh settings") from exc
        finally:
            db.close()

    def _replace(self, settings: RefreshSettings) -> None:
        if settings == self._settings:
            return
        self._settings = settings
        for listener in list(self._listeners):
            try:
                listener(settings)
            except Exception:
                logger.exception("Auto-refresh settings listener failed")


refresh_settings_store = RefreshSettingsStore()


__all__ = [
    "RefreshSettingsStore",
    "SettingsListener",
    "SettingsPersistenceError",
    "parse_settings",
    "refresh_settings_store",
]
