# src/taskflow/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole service.
- No secrets required at import time: without SMTP credentials the
  reminder subsystem simply stays off.
- The variable names of the original TaskFlow server (GMAIL_USER,
  GMAIL_APP_PASSWORD, APP_URL) are still honoured as fallbacks.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKFLOW"

# Real environment always wins over .env.
load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths ----
    data_dir: Path
    tasks_db_path: Path

    # ---- Outbound mail ----
    smtp_host: str
    smtp_port: int
    smtp_user: str | None
    smtp_password: str | None
    smtp_timeout_seconds: float
    mail_from_name: str

    # ---- Links rendered into emails ----
    app_url: str

    @property
    def reminders_enabled(self) -> bool:
        """Reminder emails need both a mailbox and its app password."""
        return bool(self.smtp_user) and bool(self.smtp_password)

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskflow")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskflow"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        smtp_host = _env(_k("SMTP_HOST"), "smtp.gmail.com").strip()
        smtp_port = _env_int(_k("SMTP_PORT"), 587)
        smtp_user = (_first_env(_k("SMTP_USER"), "GMAIL_USER", default="") or "").strip() or None
        smtp_password = (
            _first_env(_k("SMTP_PASSWORD"), "GMAIL_APP_PASSWORD", default="") or ""
        ).strip() or None
        smtp_timeout_seconds = _env_float(_k("SMTP_TIMEOUT_SECONDS"), 30.0)
        mail_from_name = _env(_k("MAIL_FROM_NAME"), "TaskFlow")

        app_url = (_first_env(_k("APP_URL"), "APP_URL", default="http://localhost:3000") or "").rstrip("/")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            smtp_host=smtp_host,
            smtp_port=smtp_port,
            smtp_user=smtp_user,
            smtp_password=smtp_password,
            smtp_timeout_seconds=smtp_timeout_seconds,
            mail_from_name=mail_from_name,
            app_url=app_url,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
