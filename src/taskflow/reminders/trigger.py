# src/taskflow/reminders/trigger.py

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from ..errors import ReminderPassError

logger = logging.getLogger(__name__)

PassFn = Callable[[datetime], Awaitable[Any]]
Clock = Callable[[], datetime]
Sleep = Callable[[float], Awaitable[Any]]


class TriggerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


def utc_now() -> datetime:
    return datetime.now(UTC)


_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
HOUR = timedelta(hours=1)


def next_boundary(now: datetime, period: timedelta = HOUR) -> datetime:
    """First multiple of `period` since the UTC epoch strictly after `now`."""
    elapsed = now.astimezone(UTC) - _EPOCH
    return _EPOCH + (elapsed // period + 1) * period


def next_hour_boundary(now: datetime) -> datetime:
    """First top-of-the-hour instant (UTC) strictly after `now`."""
    return next_boundary(now, HOUR)


class ReminderTrigger:
    """
    Fires a reminder pass once at start, then on every `period` boundary (UTC).

    Clock and sleep are injected so tests can drive time by hand.
    A tick that arrives while a pass is still running is skipped, not queued.
    A running pass is shielded from cancellation of the loop; stop() ends the
    loop and waits for that pass to finish.
    """

    def __init__(
        self,
        pass_fn: PassFn,
        *,
        clock: Clock = utc_now,
        sleep: Sleep = asyncio.sleep,
        period: timedelta = HOUR,
    ) -> None:
        if period <= timedelta(0):
            raise ValueError("period must be positive")
        self._pass_fn = pass_fn
        self._clock = clock
        self._sleep = sleep
        self._period = period
        self._state = TriggerState.IDLE
        self._task: asyncio.Task[None] | None = None
        self._current: asyncio.Task[Any] | None = None

    @property
    def state(self) -> TriggerState:
        return self._state

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    async def _guarded_pass(self, now: datetime) -> Any:
        try:
            return await self._pass_fn(now)
        except ReminderPassError:
            # Already logged by the dispatcher; the next tick retries.
            return None
        except Exception:
            logger.exception("Reminder pass crashed")
            return None
        finally:
            self._state = TriggerState.IDLE
            self._current = None

    async def tick(self, now: datetime | None = None) -> Any:
        """Run one pass unless one is already running. Returns the pass result or None."""
        if self._state == TriggerState.RUNNING:
            logger.warning("Reminder pass still running; skipping this tick")
            return None

        self._state = TriggerState.RUNNING
        self._current = asyncio.create_task(
            self._guarded_pass(self._clock() if now is None else now),
            name="reminder-pass",
        )
        return await asyncio.shield(self._current)

    async def run(self) -> None:
        # Startup pass catches anything that came into the window while we were down.
        await self.tick()
        target = next_boundary(self._clock(), self._period)
        while True:
            delay = (target - self._clock()).total_seconds()
            await self._sleep(max(0.0, delay))
            # A sleep that wakes a little early still counts as the boundary tick.
            await self.tick(max(target, self._clock()))
            target = next_boundary(max(target, self._clock()), self._period)

    def start(self) -> asyncio.Task[None]:
        """Schedule run() on the current event loop. Calling twice returns the same task."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="reminder-trigger")
            logger.info("Reminder trigger started (every %s, UTC).", self._period)
        return self._task

    async def stop(self) -> None:
        """Stop scheduling new passes; a pass already in progress runs to completion."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        current = self._current
        if current is not None:
            logger.info("Waiting for the running reminder pass to finish...")
            await current
