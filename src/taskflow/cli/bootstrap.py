# src/taskflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations (SQLite store, SMTP gateway) into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import ReminderGateway
from ..core.state import AppState
from ..reminders.email_gateway import SmtpReminderGateway
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    gateway: ReminderGateway | None = None
    if settings.reminders_enabled:
        gateway = SmtpReminderGateway.from_settings(settings)
    else:
        logger.info("No SMTP credentials configured; reminder gateway not created.")

    return AppState(
        settings=settings,
        task_store=TaskStore(settings.tasks_db_path),
        reminder_gateway=gateway,
    )
