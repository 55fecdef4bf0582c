"""SMTP delivery for password recovery emails."""

from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage

from app.config.settings import MailConfig, settings

logger = logging.getLogger("app.services.email")


class EmailServiceError(RuntimeError):
    """Raised when the email service cannot deliver a message."""


def _build_message(sender: str, recipient: str, subject: str, body: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = recipient
    message["Subject"] = subject
    message.set_content(body)
    return message


def _deliver(config: MailConfig, message: EmailMessage) -> None:
    context = ssl.create_default_context()
    password = config.password.get_secret_value() if config.password else None

    if config.use_ssl:
        client: smtplib.SMTP = smtplib.SMTP_SSL(config.host, config.port, context=context)
    else:
        client = smtplib.SMTP(config.host, config.port)

    with client:
        if config.use_tls and not config.use_ssl:
            client.starttls(context=context)
        if config.username and password:
            client.login(config.username, password)
        client.send_message(message)


async def send_email(*, recipient: str, subject: str, body: str) -> None:
    """Send a plain text email through the configured SMTP server."""

    config = settings.mail
    if not config.is_configured():
        raise EmailServiceError("SMTP settings are not configured.")

    message = _build_message(config.sender, recipient, subject, body)
    try:
        await asyncio.to_thread(_deliver, config, message)
    except (smtplib.SMTPException, OSError) as exc:  # pragma: no cover - network errors
        logger.warning("Email to %s failed: %s", recipient, exc)
        raise EmailServiceError("Failed to send email.") from exc


__all__ = ["EmailServiceError", "send_email"]
