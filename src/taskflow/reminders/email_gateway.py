# src/taskflow/reminders/email_gateway.py

"""SMTP reminder gateway using aiosmtplib.

Renders a ReminderPayload into an HTML email and sends it over SMTP with
STARTTLS (Gmail app-password setup by default). Any transport error is
raised as ReminderDeliveryError so the dispatcher counts the task as failed
and leaves it eligible for the next pass.
"""

from __future__ import annotations

import html
import logging
from datetime import UTC, datetime
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

import aiosmtplib

from ..errors import ReminderDeliveryError
from ..tasks.task_models import ReminderPayload

logger = logging.getLogger(__name__)

_PRIORITY_COLOUR = {"High": "#ef4444", "Medium": "#f59e0b", "Low": "#10b981"}
_PRIORITY_BADGE_BG = {"High": "#fee2e2", "Medium": "#fef3c7", "Low": "#d1fae5"}


def format_due_date(due: datetime) -> str:
    """'Tuesday, March 4, 2025' (UTC calendar date)."""
    d = due.astimezone(UTC)
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def reminder_subject(payload: ReminderPayload) -> str:
    return f'⏰ Reminder: "{payload.task_title}" is due tomorrow'


def render_reminder_html(payload: ReminderPayload, *, app_url: str, year: int | None = None) -> str:
    colour = _PRIORITY_COLOUR.get(payload.priority, "#6366f1")
    badge_bg = _PRIORITY_BADGE_BG.get(payload.priority, "#e0e7ff")
    if year is None:
        year = datetime.now(UTC).year

    esc = html.escape
    description_row = ""
    if payload.task_description:
        description_row = (
            '<tr><td style="padding:16px 24px;border-bottom:1px solid #e2e8f0;">'
            '<p style="margin:0 0 6px;color:#64748b;font-size:11px;font-weight:700;'
            'text-transform:uppercase;">Description</p>'
            f'<p style="margin:0;color:#475569;font-size:14px;">{esc(payload.task_description)}</p>'
            "</td></tr>"
        )

    return f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"/><title>Task Reminder - TaskFlow</title></head>
<body style="margin:0;padding:0;background:#f6f6f8;font-family:'Segoe UI',Arial,sans-serif;">
<table width="100%" cellpadding="0" cellspacing="0" style="padding:40px 0;"><tr><td align="center">
<table width="560" cellpadding="0" cellspacing="0" style="background:#ffffff;border-radius:16px;">
<tr><td style="background:#4f46e5;padding:28px 32px;color:#fff;font-size:22px;font-weight:700;">TaskFlow</td></tr>
<tr><td style="padding:32px;">
<p style="margin:0 0 8px;color:#64748b;font-size:14px;">Hi {esc(payload.to_name)},</p>
<p style="margin:0 0 24px;color:#0f172a;font-size:18px;font-weight:700;">You have a task due tomorrow</p>
<table width="100%" cellpadding="0" cellspacing="0" style="background:#f8fafc;border:1px solid #e2e8f0;border-radius:12px;">
<tr><td style="padding:20px 24px;border-bottom:1px solid #e2e8f0;">
<p style="margin:0 0 6px;color:#64748b;font-size:11px;font-weight:700;text-transform:uppercase;">Task</p>
<p style="margin:0;color:#0f172a;font-size:16px;font-weight:700;">{esc(payload.task_title)}</p>
</td></tr>
{description_row}
<tr><td style="padding:16px 24px;">
<p style="margin:0 0 6px;color:#64748b;font-size:11px;font-weight:700;text-transform:uppercase;">Due Date</p>
<p style="margin:0;color:#0f172a;font-size:14px;font-weight:600;">{esc(format_due_date(payload.due_date))}</p>
<p style="margin:12px 0 6px;color:#64748b;font-size:11px;font-weight:700;text-transform:uppercase;">Priority</p>
<span style="background:{badge_bg};color:{colour};font-size:12px;font-weight:700;padding:4px 10px;border-radius:6px;">{esc(payload.priority)}</span>
</td></tr>
</table>
<p style="text-align:center;margin:24px 0 0;">
<a href="{esc(app_url)}/tasks" style="display:inline-block;background:#4f46e5;color:#fff;font-size:14px;font-weight:700;padding:12px 28px;border-radius:10px;text-decoration:none;">View Task</a>
</p>
</td></tr>
<tr><td style="padding:20px 32px;border-top:1px solid #e2e8f0;color:#94a3b8;font-size:12px;text-align:center;">
You're receiving this because you enabled reminders for this task.<br/>
&copy; {year} TaskFlow
</td></tr>
</table>
</td></tr></table>
</body>
</html>"""


class SmtpReminderGateway:
    """
    ReminderGateway over SMTP.

    Supports STARTTLS (port 587, default) and implicit TLS (port 465).
    """

    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: str,
        password: str,
        app_url: str,
        from_name: str = "TaskFlow",
        timeout: float = 30.0,
    ) -> None:
        if not host:
            raise ValueError("SMTP host is required")
        if not username or not password:
            raise ValueError("SMTP username and password are required")

        self._host = host
        self._port = int(port)
        self._username = username
        self._password = password
        self._app_url = app_url.rstrip("/")
        self._from_name = from_name
        self._timeout = float(timeout)

        logger.info("SMTP reminder gateway ready host=%s port=%s", self._host, self._port)

    @classmethod
    def from_settings(cls, settings) -> SmtpReminderGateway:
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            app_url=settings.app_url,
            from_name=settings.mail_from_name,
            timeout=settings.smtp_timeout_seconds,
        )

    def build_message(self, payload: ReminderPayload) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((self._from_name, self._username))
        msg["To"] = payload.to_email
        msg["Subject"] = reminder_subject(payload)
        msg["Message-ID"] = make_msgid()
        msg.set_content(
            f"Hi {payload.to_name},\n\n"
            f"Your task \"{payload.task_title}\" is due {format_due_date(payload.due_date)}.\n"
            f"Priority: {payload.priority}\n\n"
            f"{self._app_url}/tasks\n"
        )
        msg.add_alternative(render_reminder_html(payload, app_url=self._app_url), subtype="html")
        return msg

    async def send_reminder(self, payload: ReminderPayload) -> None:
        msg = self.build_message(payload)
        implicit_tls = self._port == 465
        try:
            await aiosmtplib.send(
                msg,
                hostname=self._host,
                port=self._port,
                username=self._username,
                password=self._password,
                use_tls=implicit_tls,
                start_tls=not implicit_tls,
                timeout=self._timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise ReminderDeliveryError(f"SMTP delivery to {payload.to_email} failed: {exc}") from exc

        logger.info("Reminder sent -> %s | messageId: %s", payload.to_email, msg["Message-ID"])
