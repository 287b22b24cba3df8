# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskflow.core.state import AppState
from taskflow.tasks.task_store import TaskStore

from .fakes import FakeGateway

NOW = datetime(2025, 3, 3, 12, 0, 0, tzinfo=UTC)


@pytest.fixture()
def now() -> datetime:
    """A fixed instant shared by the store clock and the reminder passes."""
    return NOW


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the reminder subsystem.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the developer's environment.
    """
    return SimpleNamespace(
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        reminders_enabled=True,
        app_url="http://localhost:3000",
    )


@pytest.fixture()
def store(settings: SimpleNamespace, now: datetime) -> TaskStore:
    # Real SQLite: the reminder query is part of what we test.
    return TaskStore(settings.tasks_db_path, clock=lambda: now)


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, gateway: FakeGateway) -> AppState:
    return AppState(settings=settings, task_store=store, reminder_gateway=gateway)
