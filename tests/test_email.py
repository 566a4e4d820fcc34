"""
Tests for email templates and SMTP delivery.

smtplib is patched out: no connection is ever opened.
"""

import smtplib
from unittest.mock import MagicMock, patch

import pytest
from tenacity import wait_none

from budgetly.exceptions import ServiceException
from budgetly.services.email import (
    EmailTemplates,
    EmailTemplateType,
    SmtpEmailService,
)


class TestEmailTemplates:
    """Tests for EmailTemplates."""

    def test_password_reset(self):
        template = EmailTemplates.get_template(
            EmailTemplateType.PASSWORD_RESET,
            reset_link="https://app.budgetly.com/reset-password?token=abc",
        )

        assert template.subject == "Password Reset Request"
        assert template.text == (
            "Click the following link to reset your password: "
            "https://app.budgetly.com/reset-password?token=abc"
        )
        assert 'href="https://app.budgetly.com/reset-password?token=abc"' in template.html

    def test_welcome(self):
        template = EmailTemplates.get_template(EmailTemplateType.WELCOME, username="Jane")

        assert template.subject == "Welcome to Our App!"
        assert template.text == "Hello Jane, welcome aboard!"
        assert "Welcome, Jane!" in template.html

    def test_generic(self):
        template = EmailTemplates.get_template("generic", message="Your plan is ready")

        assert template.subject == "Notification"
        assert template.text == "Your plan is ready"

    def test_html_is_escaped(self):
        template = EmailTemplates.get_template(
            EmailTemplateType.WELCOME, username="<script>alert(1)</script>"
        )
        assert "<script>" not in template.html
        assert "&lt;script&gt;" in template.html

    def test_missing_parameter(self):
        with pytest.raises(ServiceException, match="Missing template parameter: reset_link"):
            EmailTemplates.get_template(EmailTemplateType.PASSWORD_RESET)


@pytest.fixture
def smtp_client():
    client = MagicMock()
    client.__enter__.return_value = client
    client.send_message.return_value = {}
    return client


@pytest.fixture
def no_wait(monkeypatch):
    """Retry immediately instead of backing off."""
    monkeypatch.setattr(SmtpEmailService._send_with_retry.retry, "wait", wait_none())


class TestSmtpEmailService:
    """Tests for SmtpEmailService."""

    def test_requires_server(self):
        with pytest.raises(ServiceException):
            SmtpEmailService("")

    async def test_sends_multipart_message(self, smtp_client):
        service = SmtpEmailService("smtp.example.com", 587, "user", "pass")

        with patch("smtplib.SMTP", return_value=smtp_client) as smtp_cls:
            await service.send_email(
                "noreply@budgetly.com", "jane@example.com", "Hi", "plain", "<p>html</p>"
            )

        smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=10.0)
        smtp_client.login.assert_called_once_with("user", "pass")
        message = smtp_client.send_message.call_args.args[0]
        assert message["From"] == "noreply@budgetly.com"
        assert message["To"] == "jane@example.com"
        assert message["Subject"] == "Hi"
        assert message.is_multipart()

    async def test_no_login_without_credentials(self, smtp_client):
        service = SmtpEmailService("smtp.example.com", 25)

        with patch("smtplib.SMTP", return_value=smtp_client):
            await service.send_email("a@b.com", "c@d.com", "Hi", "plain")

        smtp_client.login.assert_not_called()

    async def test_port_465_uses_implicit_tls(self, smtp_client):
        service = SmtpEmailService("smtp.example.com", 465)

        with patch("smtplib.SMTP_SSL", return_value=smtp_client) as ssl_cls, \
                patch("smtplib.SMTP") as plain_cls:
            await service.send_email("a@b.com", "c@d.com", "Hi", "plain")

        ssl_cls.assert_called_once()
        plain_cls.assert_not_called()

    async def test_refused_recipients(self, smtp_client):
        smtp_client.send_message.side_effect = smtplib.SMTPRecipientsRefused(
            {"c@d.com": (550, b"No such user")}
        )
        service = SmtpEmailService("smtp.example.com")

        with patch("smtplib.SMTP", return_value=smtp_client):
            with pytest.raises(ServiceException, match="Rejected recipients: c@d.com"):
                await service.send_email("a@b.com", "c@d.com", "Hi", "plain")

    async def test_partially_refused(self, smtp_client):
        smtp_client.send_message.return_value = {"x@d.com": (550, b"No such user")}
        service = SmtpEmailService("smtp.example.com")

        with patch("smtplib.SMTP", return_value=smtp_client):
            with pytest.raises(ServiceException, match="x@d.com"):
                await service.send_email("a@b.com", "x@d.com, c@d.com", "Hi", "plain")

    async def test_authentication_error_wrapped(self, smtp_client):
        smtp_client.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad creds")
        service = SmtpEmailService("smtp.example.com", 587, "user", "wrong")

        with patch("smtplib.SMTP", return_value=smtp_client):
            with pytest.raises(ServiceException, match="unexpected error occurred in EmailService"):
                await service.send_email("a@b.com", "c@d.com", "Hi", "plain")

    async def test_transient_disconnect_is_retried(self, smtp_client, no_wait):
        """Test that a dropped connection is retried and then succeeds."""
        smtp_client.send_message.side_effect = [
            smtplib.SMTPServerDisconnected("dropped"),
            {},
        ]
        service = SmtpEmailService("smtp.example.com")

        with patch("smtplib.SMTP", return_value=smtp_client):
            await service.send_email("a@b.com", "c@d.com", "Hi", "plain")

        assert smtp_client.send_message.call_count == 2

    async def test_gives_up_after_three_attempts(self, no_wait):
        service = SmtpEmailService("smtp.example.com")

        with patch("smtplib.SMTP", side_effect=ConnectionRefusedError("refused")) as smtp_cls:
            with pytest.raises(ServiceException):
                await service.send_email("a@b.com", "c@d.com", "Hi", "plain")

        assert smtp_cls.call_count == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
