# src/taskflow/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..tasks.task_store import TaskStore
from .ports import ReminderGateway

if TYPE_CHECKING:
    from ..reminders.trigger import ReminderTrigger


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules.
    settings: object

    task_store: TaskStore
    # None when SMTP credentials are missing: reminders stay disabled.
    reminder_gateway: ReminderGateway | None = None
    reminder_trigger: ReminderTrigger | None = None
