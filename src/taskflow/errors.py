# src/taskflow/errors.py

from __future__ import annotations


class TaskflowError(Exception):
    """Base class for errors raised by taskflow itself."""


class ReminderPassError(TaskflowError):
    """A reminder pass could not run at all (candidate query failed)."""


class ReminderDeliveryError(TaskflowError):
    """The notification gateway could not deliver a reminder."""
