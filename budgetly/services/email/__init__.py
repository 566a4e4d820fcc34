"""Email templates and delivery."""

from budgetly.services.email.templates import (
    EmailTemplate,
    EmailTemplates,
    EmailTemplateType,
)
from budgetly.services.email.smtp_service import EmailService, SmtpEmailService

__all__ = [
    "EmailService",
    "EmailTemplate",
    "EmailTemplateType",
    "EmailTemplates",
    "SmtpEmailService",
]
