# src/taskflow/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class Priority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def from_db(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(raw)
        except ValueError:
            return cls.MEDIUM


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Only COMPLETED matters to reminders: completed tasks are never reminded.
    """

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(raw)
        except ValueError:
            return cls.TODO


@dataclass(slots=True)
class User:
    id: int
    name: str
    email: str
    created_at: datetime


@dataclass(slots=True)
class Task:
    id: int
    owner_id: int

    title: str
    description: str
    priority: Priority
    status: TaskStatus
    category: str

    due_date: datetime | None
    reminders: bool
    # Set once per due date; cleared whenever due_date changes.
    reminder_sent_at: datetime | None
    completed_at: datetime | None

    created_at: datetime
    updated_at: datetime


@dataclass(slots=True, frozen=True)
class ReminderPayload:
    """Everything the notification gateway needs to render one reminder."""

    to_email: str
    to_name: str
    task_title: str
    task_description: str
    priority: str
    due_date: datetime
