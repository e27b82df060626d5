"""Fire-and-forget email notifications.

Delivery runs after the response has been sent (FastAPI background tasks),
so a failed or slow SMTP server never blocks or fails the request that
asked for the message. Failures are logged and dropped.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from fastapi import BackgroundTasks

from volunteer_portal.core.config import Settings
from volunteer_portal.core.structured_logging import log_json

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def dispatch(self, to: str, subject: str, html: str) -> None:
        """Queue a message for delivery without waiting for the outcome."""
        ...


class EmailSender:
    """Blocking SMTP delivery, run on a worker thread."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _send_sync(self, to: str, subject: str, html: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.settings.smtp_from
        msg["To"] = to
        msg.attach(MIMEText(html, "html"))

        host, port = self.settings.smtp_host, self.settings.smtp_port
        if port == 465:
            server = smtplib.SMTP_SSL(host, port, context=ssl.create_default_context(), timeout=30)
        else:
            server = smtplib.SMTP(host, port, timeout=30)
            if self.settings.smtp_use_tls:
                server.starttls(context=ssl.create_default_context())
        try:
            if self.settings.smtp_user:
                server.login(self.settings.smtp_user, self.settings.smtp_password)
            server.sendmail(self.settings.smtp_from, [to], msg.as_string())
        finally:
            server.quit()

    async def send(self, to: str, subject: str, html: str) -> None:
        try:
            await asyncio.to_thread(self._send_sync, to, subject, html)
        except (OSError, smtplib.SMTPException) as exc:
            log_json(
                logger,
                logging.ERROR,
                "email_failed",
                to=to,
                subject=subject,
                error=str(exc),
            )
            return
        log_json(logger, logging.INFO, "email_sent", to=to, subject=subject)


class BackgroundNotifier:
    """Notifier that hands messages to the request's background tasks."""

    def __init__(self, background_tasks: BackgroundTasks, sender: EmailSender):
        self.background_tasks = background_tasks
        self.sender = sender

    def dispatch(self, to: str, subject: str, html: str) -> None:
        self.background_tasks.add_task(self.sender.send, to, subject, html)
