"""
Email Delivery

SmtpEmailService sends mail through a plain SMTP server.

DESIGN DECISION: smtplib is blocking, so each send runs in a worker
thread. Transient connection problems are retried; a server that
refuses recipients is not (retrying would not change its answer).
"""

import asyncio
import smtplib
import ssl
from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import Optional

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from budgetly.exceptions import ServiceException


logger = structlog.get_logger(__name__)


class EmailService(ABC):
    """Interface consumed by the use cases."""

    @abstractmethod
    async def send_email(
        self,
        sender: str,
        to: str,
        subject: str,
        text: str,
        html: Optional[str] = None,
    ) -> None:
        """
        Deliver one email.

        Raises:
            ServiceException: If delivery fails
        """
        pass


class SmtpEmailService(EmailService):
    """
    EmailService over SMTP.

    Port 465 uses implicit TLS; any other port upgrades with STARTTLS
    when the server offers it.
    """

    def __init__(
        self,
        server: str,
        port: int = 587,
        user: Optional[str] = None,
        password: Optional[str] = None,
        timeout_seconds: float = 10.0,
    ):
        if not server:
            raise ServiceException("EmailService: Missing required service param")
        self._server = server
        self._port = port
        self._user = user
        self._password = password
        self._timeout = timeout_seconds

    @staticmethod
    def _build_message(
        sender: str,
        to: str,
        subject: str,
        text: str,
        html: Optional[str],
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        if html:
            message.add_alternative(html, subtype="html")
        return message

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self._port == 465:
            return smtplib.SMTP_SSL(
                self._server, self._port, timeout=self._timeout, context=context
            )
        client = smtplib.SMTP(self._server, self._port, timeout=self._timeout)
        client.ehlo()
        if client.has_extn("starttls"):
            client.starttls(context=context)
            client.ehlo()
        return client

    def _deliver(self, message: EmailMessage) -> dict:
        with self._connect() as client:
            if self._user and self._password:
                client.login(self._user, self._password)
            return client.send_message(message)

    @retry(
        retry=retry_if_exception_type((smtplib.SMTPServerDisconnected, ConnectionError, TimeoutError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _send_with_retry(self, message: EmailMessage) -> dict:
        return await asyncio.to_thread(self._deliver, message)

    async def send_email(
        self,
        sender: str,
        to: str,
        subject: str,
        text: str,
        html: Optional[str] = None,
    ) -> None:
        message = self._build_message(sender, to, subject, text, html)
        try:
            refused = await self._send_with_retry(message)
        except smtplib.SMTPRecipientsRefused as e:
            raise ServiceException(
                f"Failed to send email. Rejected recipients: {', '.join(e.recipients)}"
            )
        except (smtplib.SMTPException, OSError) as e:
            logger.error("email_send_failed", to=to, subject=subject, error=str(e))
            raise ServiceException(f"An unexpected error occurred in EmailService: {e}")

        if refused:
            raise ServiceException(
                f"Failed to send email. Rejected recipients: {', '.join(refused)}"
            )
        logger.info("email_sent", to=to, subject=subject)
