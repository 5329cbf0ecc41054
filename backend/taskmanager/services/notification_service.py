"""Email notification helpers."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Iterable

from fastapi import BackgroundTasks
from jinja2 import Environment, FileSystemLoader, select_autoescape

from taskmanager.core.config import get_settings

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
_ENV = Environment(
    loader=FileSystemLoader(_TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)


def smtp_enabled() -> bool:
    settings = get_settings()
    return bool(settings.smtp_host and settings.smtp_port)


def schedule_email(
    background_tasks: BackgroundTasks,
    *,
    recipients: Iterable[str],
    subject: str,
    body: str,
) -> bool:
    """Queue an email to be delivered after the response is sent."""
    recipients_list = [addr for addr in recipients if addr]
    if not recipients_list:
        logger.debug("No recipients provided for email; skipping")
        return False
    if not smtp_enabled():
        logger.debug("SMTP disabled; skipping email to %s", recipients_list)
        return False
    background_tasks.add_task(_send_email, recipients_list, subject, body)
    return True


def build_password_reset_email(*, name: str | None, token: str) -> tuple[str, str]:
    template = _ENV.get_template("password_reset_email.txt")
    body = template.render(
        name=name,
        token=token,
        ttl_minutes=get_settings().password_reset_ttl_minutes,
    )
    return "Reset your TaskManager password", body


def _send_email(recipients: list[str], subject: str, body: str) -> None:
    settings = get_settings()
    if not settings.smtp_host or not settings.smtp_port:
        logger.info("SMTP settings missing; skipping email delivery to %s", recipients)
        return

    message = EmailMessage()
    message["Subject"] = subject
    message["To"] = ", ".join(recipients)
    message["From"] = (
        settings.smtp_from or settings.smtp_username or "no-reply@taskmanager.local"
    )
    message.set_content(body)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as smtp:
            if settings.smtp_username and settings.smtp_password:
                smtp.starttls()
                smtp.login(settings.smtp_username, settings.smtp_password)
            smtp.send_message(message)
        logger.info("Email sent to %s", recipients)
    except Exception as exc:  # pragma: no cover - logging side-effect only
        logger.exception("Failed to send email to %s: %s", recipients, exc)
