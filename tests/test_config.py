# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskflow.config import Settings

_VARS = [
    "TASKFLOW_SMTP_USER",
    "TASKFLOW_SMTP_PASSWORD",
    "GMAIL_USER",
    "GMAIL_APP_PASSWORD",
    "TASKFLOW_APP_URL",
    "APP_URL",
    "TASKFLOW_DATA_DIR",
    "TASKFLOW_TASKS_DB_PATH",
    "TASKFLOW_SMTP_PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_disable_reminders() -> None:
    s = Settings.from_env()
    assert s.reminders_enabled is False
    assert s.smtp_host == "smtp.gmail.com"
    assert s.smtp_port == 587
    assert s.app_url == "http://localhost:3000"
    assert s.tasks_db_path == Path(".local/taskflow") / "tasks.sqlite3"


def test_legacy_gmail_variables_enable_reminders(monkeypatch) -> None:
    monkeypatch.setenv("GMAIL_USER", "bot@gmail.com")
    monkeypatch.setenv("GMAIL_APP_PASSWORD", "abcd efgh")
    monkeypatch.setenv("APP_URL", "https://tasks.example/")

    s = Settings.from_env()
    assert s.reminders_enabled is True
    assert s.smtp_user == "bot@gmail.com"
    assert s.app_url == "https://tasks.example"


def test_prefixed_variables_win(monkeypatch) -> None:
    monkeypatch.setenv("GMAIL_USER", "legacy@gmail.com")
    monkeypatch.setenv("TASKFLOW_SMTP_USER", "new@example.com")
    monkeypatch.setenv("TASKFLOW_SMTP_PASSWORD", "pw")
    monkeypatch.setenv("TASKFLOW_SMTP_PORT", "not-a-number")

    s = Settings.from_env()
    assert s.smtp_user == "new@example.com"
    assert s.smtp_port == 587


def test_user_without_password_stays_disabled(monkeypatch) -> None:
    monkeypatch.setenv("GMAIL_USER", "bot@gmail.com")
    assert Settings.from_env().reminders_enabled is False


def test_data_dir_drives_db_path(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("TASKFLOW_DATA_DIR", str(tmp_path))
    assert Settings.from_env().tasks_db_path == tmp_path / "tasks.sqlite3"
