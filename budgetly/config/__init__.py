"""Configuration package."""

from budgetly.config.settings import (
    AppSettings,
    GeminiSettings,
    Settings,
    SmtpSettings,
    TokenSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GeminiSettings",
    "Settings",
    "SmtpSettings",
    "TokenSettings",
    "get_settings",
    "validate_all_settings",
]
