"""
Password Use Cases

CRITICAL: A user has at most one active password record at any time.
Changing a password is a single repository operation
(`replace_active`), never a deactivate followed by a create.
"""

from typing import Optional

from budgetly.audit import AuditLogger
from budgetly.models.entities import Password, User
from budgetly.services.email import EmailService, EmailTemplates, EmailTemplateType
from budgetly.services.security import TokenService
from budgetly.services.storage.interface import PasswordCommandRepository


DEFAULT_SENDER = "noreply@budgetly.com"


class CreatePassword:

    def __init__(self, repository: PasswordCommandRepository):
        self._repository = repository

    async def execute(self, password: Password) -> Password:
        return await self._repository.create(password)


class ResetPassword:
    """Swap the user's active password record for a new one."""

    def __init__(
        self,
        repository: PasswordCommandRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repository = repository
        self._audit_logger = audit_logger

    async def execute(self, new_password: Password, old_password: Password) -> Password:
        stored = await self._repository.replace_active(old_password.id, new_password)

        if self._audit_logger:
            await self._audit_logger.log_password_reset(
                str(new_password.user_id), str(old_password.id), str(stored.id)
            )
        return stored


class ForgotPassword:
    """
    Email the user a password reset link.

    The link carries a signed token bound to the user's id. No reset state
    is stored: the token itself is the proof, checked when the link is used.

    Args:
        token_service: Issues the reset token
        email_service: Delivers the email
        frontend_url: Base URL of the web client (no trailing slash)
        sender: From address
    """

    def __init__(
        self,
        token_service: TokenService,
        email_service: EmailService,
        frontend_url: str,
        sender: str = DEFAULT_SENDER,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._token_service = token_service
        self._email_service = email_service
        self._frontend_url = frontend_url.rstrip("/")
        self._sender = sender
        self._audit_logger = audit_logger

    async def execute(self, user: User) -> None:
        token = self._token_service.generate_token_for_user(user.id)
        template = EmailTemplates.get_template(
            EmailTemplateType.PASSWORD_RESET,
            reset_link=f"{self._frontend_url}/reset-password?token={token}",
        )

        await self._email_service.send_email(
            self._sender,
            str(user.email),
            template.subject,
            template.text,
            template.html,
        )

        if self._audit_logger:
            await self._audit_logger.log_password_reset_requested(str(user.id))
