"""Email delivery for stock alerts over SMTP."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

from stockwatch.core.config import Settings, get_settings
from stockwatch.core.enums import AlertChannel
from stockwatch.core.exceptions import NotificationError
from stockwatch.integrations.base import EmailSender

logger = logging.getLogger(__name__)


class SmtpEmailSender(EmailSender):
    """Lightweight SMTP helper; the blocking send runs in a worker thread."""

    def __init__(self, settings: Settings):
        self._settings = settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def send(self, to: str, subject: str, body: str, html: Optional[str] = None) -> bool:
        if not self._ready():
            logger.warning("SMTP configuration incomplete; alert email to %s skipped", to)
            return False
        if not to:
            logger.warning("No recipient for alert email; skipping")
            return False

        message = self._build_message(subject, to, body, html)
        try:
            await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as exc:
            error = NotificationError(AlertChannel.EMAIL.value, str(exc))
            logger.error("Failed to send alert email to %s: %s", to, error)
            return False

        logger.info("Alert email sent to %s", to)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _ready(self) -> bool:
        settings = self._settings
        return bool(settings.SMTP_HOST and settings.SMTP_USERNAME and settings.SMTP_PASSWORD)

    def _build_message(self, subject: str, to: str, body_text: str, body_html: Optional[str] = None) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self._formatted_from_address
        message["To"] = to
        message.set_content(body_text)
        if body_html:
            message.add_alternative(body_html, subtype="html")
        return message

    @property
    def _formatted_from_address(self) -> str:
        from_email = self._settings.SMTP_FROM_EMAIL or self._settings.SMTP_USERNAME
        from_name = self._settings.SMTP_FROM_NAME or "Stock Alerts"
        return formataddr((from_name, from_email))

    def _send_sync(self, message: EmailMessage) -> None:
        settings = self._settings
        host = settings.SMTP_HOST
        port = settings.SMTP_PORT or (465 if settings.SMTP_USE_SSL else 587)
        timeout = settings.SMTP_TIMEOUT

        if settings.SMTP_USE_SSL:
            smtp = smtplib.SMTP_SSL(host=host, port=port, timeout=timeout)
        else:
            smtp = smtplib.SMTP(host=host, port=port, timeout=timeout)
        try:
            if settings.SMTP_USE_TLS and not settings.SMTP_USE_SSL:
                smtp.starttls()

            smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(message)
        finally:
            try:
                smtp.quit()
            except smtplib.SMTPException:
                smtp.close()


def get_email_sender() -> SmtpEmailSender:
    """Factory for dependency injection."""
    return SmtpEmailSender(get_settings())
