"""Shared fixtures for scheduler, store, view and API tests."""
from __future__ import annotations

import os
from typing import Iterator

import pytest
from sqlalchemy import delete

# Point the settings store at a dedicated sqlite database before the package is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_social_client.db")
os.environ.setdefault("MOUNT_VIEWS_ON_STARTUP", "false")

from social_client.database import Base, SessionLocal, engine  # noqa: E402
from social_client.models import ClientSetting  # noqa: E402
from social_client.refresh import EnvironmentMonitor, RefreshScheduler  # noqa: E402

from .support import FlakyOperation, ManualTimers  # noqa: E402


@pytest.fixture
def timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture
def monitor() -> EnvironmentMonitor:
    return EnvironmentMonitor()


@pytest.fixture
def scheduler(timers: ManualTimers, monitor: EnvironmentMonitor) -> Iterator[RefreshScheduler]:
    instance = RefreshScheduler(monitor, name="test", call_later=timers.call_later, clock=timers.clock)
    yield instance
    instance.stop()


@pytest.fixture
def operation() -> FlakyOperation:
    return FlakyOperation()


@pytest.fixture(scope="session", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_settings() -> Iterator[None]:
    with SessionLocal() as session:
        session.execute(delete(ClientSetting))
        session.commit()
    yield
