# src/taskflow/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then either:
- runs a single reminder pass and exits (--once), or
- starts the hourly reminder subsystem and waits for SIGINT/SIGTERM.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..core.state import AppState
from ..errors import ReminderPassError
from ..logging_setup import setup_logging
from ..reminders import start_reminder_subsystem
from ..reminders.dispatcher import run_reminder_pass

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="taskflow", description="TaskFlow reminder service")
    parser.add_argument("--once", action="store_true", help="run one reminder pass and exit")
    parser.add_argument("--log-level", default=None, help="console log level (default: from settings)")
    return parser.parse_args(argv)


async def _serve(state: AppState) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on every platform (e.g. Windows event loops).
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)
            installed.append(sig)

    try:
        start_reminder_subsystem(state)
        if state.reminder_trigger is None:
            logger.info("Nothing to run. Press Ctrl+C to stop.")
        await stop.wait()
        logger.info("Shutdown requested.")

        # An in-progress pass runs to completion before the process exits.
        if state.reminder_trigger is not None:
            await state.reminder_trigger.stop()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


async def _run_once(state: AppState) -> int:
    if state.reminder_gateway is None:
        logger.error("Reminders are disabled (no SMTP credentials); nothing to do.")
        return 1
    try:
        result = await run_reminder_pass(state.task_store, state.reminder_gateway)
    except ReminderPassError:
        return 2
    return 0 if result.failed == 0 else 3


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()

    level_name = str(args.log_level or getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    if args.once:
        return asyncio.run(_run_once(state))

    try:
        asyncio.run(_serve(state))
    except KeyboardInterrupt:
        pass
    logger.info("Bye.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
