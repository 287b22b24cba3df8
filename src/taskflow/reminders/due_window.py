# src/taskflow/reminders/due_window.py

"""
Due-window selection.

A task is owed a reminder iff reminders are on, it is not completed, its due
date lies in [now, now + REMINDER_LEAD] and no reminder has been sent for it
yet. `now` must be captured once per pass and reused for both bounds.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from ..tasks.task_models import Task, TaskStatus

REMINDER_LEAD = timedelta(hours=24)


def due_window(now: datetime) -> tuple[datetime, datetime]:
    """Return the (lower, upper) bounds of the reminder window for this instant."""
    return now, now + REMINDER_LEAD


def is_due_for_reminder(task: Task, *, now: datetime, deadline: datetime) -> bool:
    if not task.reminders:
        return False
    if task.status == TaskStatus.COMPLETED:
        return False
    if task.due_date is None:
        return False
    if task.reminder_sent_at is not None:
        return False
    return now <= task.due_date <= deadline


def select_due(tasks: list[Task], now: datetime) -> list[Task]:
    """In-memory counterpart of TaskStore.find_due_candidates."""
    lower, upper = due_window(now)
    return [t for t in tasks if is_due_for_reminder(t, now=lower, deadline=upper)]
