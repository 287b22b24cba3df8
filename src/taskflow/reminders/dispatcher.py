# src/taskflow/reminders/dispatcher.py

from __future__ import annotations

"""
Reminder dispatcher.

One pass:
- captures `now` once and computes the 24h window,
- fetches candidates from the store (failure here aborts the pass),
- for each candidate: resolve owner -> build payload -> send -> mark sent,
- folds per-task outcomes into a ReminderPassResult.

A task is marked only after its email went out. If the write-back fails
after a successful send, the task stays eligible and may be emailed again on
a later pass; reminders are notifications, not transactional messages.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from ..core.ports import ReminderGateway, ReminderTaskRepo
from ..errors import ReminderPassError
from ..tasks.task_models import ReminderPayload, Task, User
from .due_window import due_window

logger = logging.getLogger(__name__)


class ReminderOutcome(str, Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class ReminderPassResult:
    started_at: datetime
    candidates: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0

    def add(self, outcome: ReminderOutcome) -> ReminderPassResult:
        return ReminderPassResult(
            started_at=self.started_at,
            candidates=self.candidates,
            sent=self.sent + (outcome == ReminderOutcome.SENT),
            skipped=self.skipped + (outcome == ReminderOutcome.SKIPPED),
            failed=self.failed + (outcome == ReminderOutcome.FAILED),
        )


def first_name(display_name: str | None) -> str:
    parts = (display_name or "").split()
    return parts[0] if parts else ""


def build_reminder_payload(task: Task, owner: User) -> ReminderPayload:
    if task.due_date is None:
        raise ValueError(f"task {task.id} has no due date")
    return ReminderPayload(
        to_email=owner.email,
        to_name=first_name(owner.name),
        task_title=task.title,
        task_description=task.description,
        priority=task.priority.value,
        due_date=task.due_date,
    )


async def _remind_one(
    task: Task,
    store: ReminderTaskRepo,
    gateway: ReminderGateway,
    now: datetime,
) -> ReminderOutcome:
    try:
        owner = store.find_owner(task.owner_id)
        if owner is None:
            logger.warning("Owner %s not found for task %s; skipping", task.owner_id, task.id)
            return ReminderOutcome.SKIPPED

        payload = build_reminder_payload(task, owner)
        await gateway.send_reminder(payload)

        # Sole guard against re-sending on the next pass.
        store.mark_reminder_sent(task.id, now)
    except Exception:
        logger.exception("Reminder failed task_id=%s", task.id)
        return ReminderOutcome.FAILED

    logger.info("Reminded %s for task %s (%r)", owner.email, task.id, task.title)
    return ReminderOutcome.SENT


async def run_reminder_pass(
        store: ReminderTaskRepo,
        gateway: ReminderGateway,
        *,
        now: datetime | None = None,
) -> ReminderPassResult:
    """
    Run one reminder pass and return its counts.

    Raises ReminderPassError if candidates cannot be fetched; nothing is
    sent or marked in that case, so the next pass retries naturally.
    Per-task failures never raise: they are logged and counted.
    """
    if now is None:
        now = datetime.now(UTC)
    lower, deadline = due_window(now)

    logger.info(
        "Reminder pass at %s; checking tasks due before %s",
        now.isoformat(),
        deadline.isoformat(),
    )

    try:
        tasks = store.find_due_candidates(now=lower, deadline=deadline)
    except Exception as exc:
        logger.exception("find_due_candidates failed; aborting pass")
        raise ReminderPassError("could not fetch reminder candidates") from exc

    result = ReminderPassResult(started_at=now, candidates=len(tasks))
    if not tasks:
        logger.info("No pending reminders.")
        return result

    logger.info("Found %d task(s) to remind.", len(tasks))

    for task in tasks:
        outcome = await _remind_one(task, store, gateway, now)
        result = result.add(outcome)

    logger.info(
        "Reminder pass done: candidates=%d sent=%d skipped=%d failed=%d",
        result.candidates,
        result.sent,
        result.skipped,
        result.failed,
    )
    return result
