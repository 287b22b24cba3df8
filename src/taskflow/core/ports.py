# src/taskflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the reminder core.

The dispatcher depends on Protocols instead of concrete implementations.
This keeps the store and the mail transport swappable and makes testing easier.
"""

from datetime import datetime
from typing import Protocol

from ..tasks.task_models import ReminderPayload, Task, User


class ReminderTaskRepo(Protocol):
    """Store-side port: the three calls a reminder pass makes."""

    def find_due_candidates(self, *, now: datetime, deadline: datetime) -> list[Task]: ...

    def find_owner(self, owner_id: int) -> User | None: ...

    def mark_reminder_sent(self, task_id: int, sent_at: datetime) -> None: ...


class ReminderGateway(Protocol):
    """
    Connector-side port: deliver one reminder to one recipient.

    Returning normally means delivered; any exception means it was not.
    Transport, templates and credentials belong to the implementation.
    """

    async def send_reminder(self, payload: ReminderPayload) -> None: ...
