# tests/test_cli.py

from __future__ import annotations

import asyncio
import os
import signal
from datetime import UTC, datetime, timedelta

import pytest

from taskflow.cli.main import _parse_args, _run_once, _serve
from taskflow.reminders.trigger import TriggerState

from .fakes import FakeGateway, SlowGateway


def test_parse_args() -> None:
    args = _parse_args(["--once", "--log-level", "debug"])
    assert args.once is True
    assert args.log_level == "debug"
    assert _parse_args([]).once is False


@pytest.mark.asyncio
async def test_run_once_sends_due_reminders(state, store, gateway) -> None:
    owner = store.add_user(name="A", email="a@example.com")
    store.add_task(owner_id=owner, title="t", due_date=datetime.now(UTC) + timedelta(hours=2))

    assert await _run_once(state) == 0
    assert len(gateway.sent) == 1


@pytest.mark.asyncio
async def test_run_once_reports_failures(state, store) -> None:
    state.reminder_gateway = FakeGateway(fail_for={"a@example.com"})
    owner = store.add_user(name="A", email="a@example.com")
    store.add_task(owner_id=owner, title="t", due_date=datetime.now(UTC) + timedelta(hours=2))

    assert await _run_once(state) == 3


@pytest.mark.asyncio
async def test_run_once_without_gateway(state) -> None:
    state.reminder_gateway = None
    assert await _run_once(state) == 1


@pytest.mark.asyncio
async def test_sigterm_mid_pass_lets_the_pass_finish(state, store) -> None:
    gateway = SlowGateway(delay=0.05)
    state.reminder_gateway = gateway
    due = datetime.now(UTC) + timedelta(hours=2)
    task_ids = []
    for i in range(3):
        owner = store.add_user(name=f"User {i}", email=f"u{i}@example.com")
        task_ids.append(store.add_task(owner_id=owner, title=f"t{i}", due_date=due))

    serving = asyncio.create_task(_serve(state))
    while not gateway.started:
        await asyncio.sleep(0.005)

    os.kill(os.getpid(), signal.SIGTERM)
    await asyncio.wait_for(serving, timeout=5.0)

    assert [p.to_email for p in gateway.sent] == ["u0@example.com", "u1@example.com", "u2@example.com"]
    assert all(store.get_task(t).reminder_sent_at is not None for t in task_ids)
    assert state.reminder_trigger.state == TriggerState.IDLE
    assert state.reminder_trigger.task.done()


@pytest.mark.asyncio
async def test_sigterm_when_disabled_just_exits(state) -> None:
    state.settings.reminders_enabled = False

    serving = asyncio.create_task(_serve(state))
    await asyncio.sleep(0.01)
    os.kill(os.getpid(), signal.SIGTERM)
    await asyncio.wait_for(serving, timeout=5.0)

    assert state.reminder_trigger is None
