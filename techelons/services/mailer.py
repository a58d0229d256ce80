"""
Outbound mail transport.

SmtpMailer delivers one message per call over SMTP using aiosmtplib. Any
transport problem is raised as MailDeliveryError so callers only have to
handle a single exception type.
"""
from __future__ import annotations

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib

from techelons.config import Settings, settings

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """A message could not be handed to the mail transport."""


class SmtpMailer:
    """Async SMTP mailer configured from Settings."""

    def __init__(self, config: Settings = settings, timeout: float = 15.0) -> None:
        self.host = config.SMTP_HOST
        self.port = config.SMTP_PORT
        self.user = config.SMTP_USER
        self.password = config.SMTP_PASSWORD
        self.use_tls = config.SMTP_USE_TLS
        self.from_name = config.EMAIL_FROM_NAME
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.user and self.password)

    async def send(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> None:
        if not self.is_configured:
            raise MailDeliveryError("SMTP credentials are not configured")

        message = MIMEMultipart("alternative")
        message["From"] = f"{self.from_name} <{self.user}>"
        message["To"] = to_email
        message["Subject"] = subject
        if text_content:
            message.attach(MIMEText(text_content, "plain"))
        message.attach(MIMEText(html_content, "html"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.user,
                password=self.password,
                use_tls=self.use_tls,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(f"{type(e).__name__}: {e}") from e
        logger.debug("Mail sent to %s: %s", to_email, subject)
