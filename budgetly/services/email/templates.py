"""Email templates keyed by EmailTemplateType."""

from enum import Enum
from html import escape

from pydantic import BaseModel

from budgetly.exceptions import ServiceException


class EmailTemplateType(str, Enum):
    PASSWORD_RESET = "password_reset"
    WELCOME = "welcome"
    GENERIC = "generic"


class EmailTemplate(BaseModel):
    subject: str
    text: str
    html: str


# Parameter each template requires.
_REQUIRED_PARAM = {
    EmailTemplateType.PASSWORD_RESET: "reset_link",
    EmailTemplateType.WELCOME: "username",
    EmailTemplateType.GENERIC: "message",
}


class EmailTemplates:

    @staticmethod
    def get_template(template_type: EmailTemplateType, **params: str) -> EmailTemplate:
        """
        Render a template.

        Usage:
            EmailTemplates.get_template(EmailTemplateType.WELCOME, username="Ana")

        Raises:
            ServiceException: If the template's parameter is missing
        """
        template_type = EmailTemplateType(template_type)
        key = _REQUIRED_PARAM[template_type]
        if params.get(key) is None:
            raise ServiceException(f"Missing template parameter: {key}")
        value = str(params[key])

        if template_type == EmailTemplateType.PASSWORD_RESET:
            return EmailTemplate(
                subject="Password Reset Request",
                text=f"Click the following link to reset your password: {value}",
                html=(
                    "<h1>Password Reset</h1>"
                    "<p>You requested to reset your password.</p>"
                    f'<p><a href="{escape(value)}" '
                    'style="background:#007BFF;color:white;padding:10px 15px;'
                    'border-radius:5px;text-decoration:none">Reset Password</a></p>'
                    "<p>If you did not request this, please ignore this email.</p>"
                ),
            )

        if template_type == EmailTemplateType.WELCOME:
            return EmailTemplate(
                subject="Welcome to Our App!",
                text=f"Hello {value}, welcome aboard!",
                html=(
                    f"<h1>Welcome, {escape(value)}!</h1>"
                    "<p>We're excited to have you with us 🎉</p>"
                ),
            )

        return EmailTemplate(
            subject="Notification",
            text=value,
            html=f"<p>{escape(value)}</p>",
        )
