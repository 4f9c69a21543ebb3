"""Mail transports: log-only (default) and SMTP."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import TYPE_CHECKING

from signflow.shared.enums import MailBackend
from signflow.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from signflow.application.interfaces.services import IMailSender
    from signflow.core.config import Settings

logger = get_logger(__name__)


class LogOnlyMailSender:
    """IMailSender implementation that logs instead of sending email.

    Use when no SMTP is configured (development, tests).
    """

    async def send(self, recipient: str, subject: str, html_body: str) -> bool:
        """Log the message; no actual email sent."""
        logger.info(
            "Mail: would send to %s (subject=%r)", recipient, (subject or "")[:80]
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Mail body (first 500 chars): %s", (html_body or "")[:500])
        return True


class SmtpMailSender:
    """IMailSender over SMTP. The blocking smtplib call runs in a worker thread."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        *,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: int = 30,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username or None
        self._password = password or None
        self._use_tls = use_tls
        self._timeout = timeout

    def _build(self, recipient: str, subject: str, html_body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self._sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML-capable mail client.")
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _send_sync(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            if self._use_tls:
                smtp.starttls()
            if self._username and self._password:
                smtp.login(self._username, self._password)
            smtp.send_message(msg)

    async def send(self, recipient: str, subject: str, html_body: str) -> bool:
        """Send one message; False (logged) on any SMTP or socket error."""
        msg = self._build(recipient, subject, html_body)
        try:
            await asyncio.to_thread(self._send_sync, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP send to %s failed: %s", recipient, e)
            return False
        logger.info("Mail sent to %s (subject=%r)", recipient, subject[:80])
        return True


def create_mail_sender(settings: Settings) -> IMailSender:
    """Build the configured mail transport."""
    if settings.mail_backend == MailBackend.SMTP:
        return SmtpMailSender(
            settings.smtp_host,
            settings.smtp_port,
            settings.mail_from,
            username=settings.smtp_username,
            password=(
                settings.smtp_password.get_secret_value()
                if settings.smtp_password
                else None
            ),
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout_seconds,
        )
    return LogOnlyMailSender()
