# tests/test_task_store.py

from __future__ import annotations

from datetime import timedelta

import pytest

from taskflow.tasks.task_models import Priority, TaskStatus
from taskflow.tasks.task_store import TaskStore


def test_add_and_get_task_roundtrip(store: TaskStore, now) -> None:
    owner = store.add_user(name="  Grace Hopper ", email=" Grace@Example.COM ")
    user = store.get_user(owner)
    assert user is not None
    assert user.name == "Grace Hopper"
    assert user.email == "grace@example.com"

    due = now + timedelta(hours=3)
    task_id = store.add_task(
        owner_id=owner,
        title="  Write report ",
        description=" quarterly ",
        priority=Priority.HIGH,
        due_date=due,
    )
    task = store.get_task(task_id)
    assert task is not None
    assert task.title == "Write report"
    assert task.description == "quarterly"
    assert task.priority == Priority.HIGH
    assert task.status == TaskStatus.TODO
    assert task.category == "None"
    assert task.reminders is True
    assert task.due_date == due
    assert task.reminder_sent_at is None
    assert task.completed_at is None
    assert task.created_at == now


def test_validation_errors(store: TaskStore) -> None:
    with pytest.raises(ValueError):
        store.add_user(name=" ", email="x@example.com")
    owner = store.add_user(name="X", email="x@example.com")
    with pytest.raises(ValueError):
        store.add_task(owner_id=owner, title="   ")

    task_id = store.add_task(owner_id=owner, title="ok")
    with pytest.raises(ValueError, match="nothing to update"):
        store.update_task(task_id)
    with pytest.raises(ValueError, match="reminder_sent_at"):
        store.update_task(task_id, reminder_sent_at=None)


def test_changing_due_date_rearms_reminder(store: TaskStore, now) -> None:
    owner = store.add_user(name="A", email="a@example.com")
    task_id = store.add_task(owner_id=owner, title="t", due_date=now + timedelta(hours=2))
    store.mark_reminder_sent(task_id, now)
    assert store.get_task(task_id).reminder_sent_at == now

    new_due = now + timedelta(days=3)
    task = store.update_task(task_id, due_date=new_due)
    assert task is not None
    assert task.due_date == new_due
    assert task.reminder_sent_at is None


def test_clearing_due_date_also_rearms(store: TaskStore, now) -> None:
    owner = store.add_user(name="A", email="a@example.com")
    task_id = store.add_task(owner_id=owner, title="t", due_date=now + timedelta(hours=2))
    store.mark_reminder_sent(task_id, now)

    task = store.update_task(task_id, due_date=None)
    assert task.due_date is None
    assert task.reminder_sent_at is None


def test_other_edits_keep_reminder_sent(store: TaskStore, now) -> None:
    owner = store.add_user(name="A", email="a@example.com")
    task_id = store.add_task(owner_id=owner, title="t", due_date=now + timedelta(hours=2))
    store.mark_reminder_sent(task_id, now)

    task = store.update_task(task_id, title="renamed", priority="Low", reminders=False)
    assert task.title == "renamed"
    assert task.priority == Priority.LOW
    assert task.reminders is False
    assert task.reminder_sent_at == now


def test_status_transitions_stamp_completed_at(store: TaskStore, now) -> None:
    owner = store.add_user(name="A", email="a@example.com")
    task_id = store.add_task(owner_id=owner, title="t")

    task = store.update_task(task_id, status=TaskStatus.COMPLETED)
    assert task.completed_at == now

    task = store.update_task(task_id, status=TaskStatus.IN_PROGRESS)
    assert task.completed_at is None

    task = store.toggle_complete(task_id)
    assert task.status == TaskStatus.COMPLETED
    assert task.completed_at == now

    task = store.toggle_complete(task_id)
    assert task.status == TaskStatus.TODO
    assert task.completed_at is None


def test_missing_task_updates_return_none(store: TaskStore) -> None:
    assert store.update_task(999, title="x") is None
    assert store.toggle_complete(999) is None
    assert store.delete_task(999) is False


def test_mark_reminder_sent_is_idempotent(store: TaskStore, now) -> None:
    owner = store.add_user(name="A", email="a@example.com")
    task_id = store.add_task(owner_id=owner, title="t", due_date=now + timedelta(hours=1))

    store.mark_reminder_sent(task_id, now)
    store.mark_reminder_sent(task_id, now)
    assert store.get_task(task_id).reminder_sent_at == now


def test_deleting_user_cascades_to_tasks(store: TaskStore) -> None:
    owner = store.add_user(name="A", email="a@example.com")
    other = store.add_user(name="B", email="b@example.com")
    store.add_task(owner_id=owner, title="t1")
    store.add_task(owner_id=owner, title="t2")
    kept = store.add_task(owner_id=other, title="t3")

    assert store.delete_user(owner) is True
    assert store.count_tasks() == 1
    assert store.get_task(kept) is not None
    assert store.find_owner(owner) is None


def test_schema_survives_reopen(store: TaskStore, settings, now) -> None:
    owner = store.add_user(name="A", email="a@example.com")
    store.add_task(owner_id=owner, title="t")

    reopened = TaskStore(settings.tasks_db_path, clock=lambda: now)
    assert reopened.count_tasks() == 1
