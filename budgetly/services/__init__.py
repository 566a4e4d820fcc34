"""Services package."""

from budgetly.services.ai import (
    AIResponse,
    AIService,
    AIStructuredResponse,
    GeminiAIService,
)
from budgetly.services.email import (
    EmailService,
    EmailTemplates,
    EmailTemplateType,
    SmtpEmailService,
)
from budgetly.services.security import (
    BcryptPasswordHasher,
    JwtTokenService,
    PasswordHasher,
    TokenService,
    user_id_from_authorization_header,
)

__all__ = [
    # AI services
    "AIResponse",
    "AIService",
    "AIStructuredResponse",
    "GeminiAIService",
    # Email services
    "EmailService",
    "EmailTemplates",
    "EmailTemplateType",
    "SmtpEmailService",
    # Security services
    "BcryptPasswordHasher",
    "JwtTokenService",
    "PasswordHasher",
    "TokenService",
    "user_id_from_authorization_header",
]
