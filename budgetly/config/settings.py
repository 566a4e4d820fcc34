"""
Configuration Management for Budgetly

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TokenSettings(BaseSettings):
    """Authentication token configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TOKEN_",
        extra="ignore"
    )

    secret: str = Field(
        ...,
        min_length=1,
        description="Secret used to sign authentication tokens"
    )
    expire_hours: int = Field(
        default=24,
        ge=1,
        description="Hours a token stays valid after being issued"
    )
    algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )


class SmtpSettings(BaseSettings):
    """Outgoing mail server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        extra="ignore"
    )

    server: str = Field(
        ...,
        description="SMTP host"
    )
    port: int = Field(
        default=587,
        ge=1,
        le=65535,
        description="SMTP port (587 uses STARTTLS, 465 uses implicit TLS)"
    )
    user: Optional[str] = Field(
        default=None,
        description="SMTP login user"
    )
    password: Optional[str] = Field(
        default=None,
        description="SMTP login password"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Socket timeout for SMTP connections"
    )


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    # Links and mail
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the web client, used in emailed links"
    )
    email_sender: str = Field(
        default="noreply@budgetly.com",
        description="From address for outgoing emails"
    )

    # Security
    password_salt_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt cost factor"
    )

    @field_validator("frontend_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Links are built as f"{frontend_url}/path", so drop a trailing slash."""
        return v.rstrip("/")


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def token(self) -> TokenSettings:
        return TokenSettings()

    @property
    def smtp(self) -> SmtpSettings:
        return SmtpSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus "<name>_error"
    entries for the ones that failed. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("token", "smtp", "gemini", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
