# src/taskflow/reminders/__init__.py

"""
Reminder subsystem.

Components:
- due_window.py: which tasks are owed a reminder right now
- dispatcher.py: one pass (select -> resolve owner -> send -> mark sent)
- trigger.py: runs a pass at startup and then at the top of every UTC hour
- email_gateway.py: SMTP delivery of the reminder email
"""

from __future__ import annotations

import logging
from datetime import datetime

from ..core.state import AppState
from .dispatcher import ReminderPassResult, run_reminder_pass
from .trigger import ReminderTrigger

logger = logging.getLogger(__name__)


def start_reminder_subsystem(state: AppState, **trigger_kwargs) -> None:
    """
    Start hourly reminders. Call once, from inside the running event loop,
    after the task store is ready.

    Does nothing (besides a warning) when SMTP credentials are not configured.
    Extra keyword arguments (clock, sleep) are passed to ReminderTrigger.
    """
    settings = state.settings
    if not getattr(settings, "reminders_enabled", False) or state.reminder_gateway is None:
        logger.warning("SMTP user / app password not set; reminder emails are DISABLED.")
        return

    if state.reminder_trigger is not None:
        logger.debug("Reminder subsystem already started.")
        return

    store = state.task_store
    gateway = state.reminder_gateway

    async def _pass(now: datetime) -> ReminderPassResult:
        return await run_reminder_pass(store, gateway, now=now)

    trigger = ReminderTrigger(_pass, **trigger_kwargs)
    state.reminder_trigger = trigger
    trigger.start()
