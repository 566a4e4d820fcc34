"""
Exception Hierarchy for Budgetly

Three families of errors flow through the system:

1. DOMAIN - InvalidParam, raised by value objects at construction time.
2. PRESENTATION - HttpError subclasses, raised by use cases when a
   precondition fails. They carry the HTTP status the caller should surface.
3. INFRASTRUCTURE - DatabaseException / ServiceException, raised by the
   adapters around persistence, hashing, tokens, email and AI.

Use cases never recover from any of them. Whatever a collaborator raises
reaches the caller unchanged.
"""

from typing import Any


class BudgetlyError(Exception):
    """Base exception for all Budgetly errors."""
    pass


class InvalidParam(BudgetlyError):
    """
    A value object rejected its input.

    NOTE: This deliberately does not inherit from ValueError. Pydantic only
    wraps ValueError/AssertionError raised inside validators, so InvalidParam
    escapes model validation untouched and callers can catch it directly.
    """

    def __init__(self, value: Any, message: str | None = None):
        self.value = value
        super().__init__(message or f"{value} is invalid")


# =============================================================================
# PRESENTATION ERRORS
# =============================================================================

class HttpError(BudgetlyError):
    """Error that maps onto an HTTP status code."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BadRequestError(HttpError):
    status_code = 400


class UnauthorizedError(HttpError):
    status_code = 401


class ForbiddenError(HttpError):
    status_code = 403


class NotFoundError(HttpError):
    status_code = 404


class InternalServerError(HttpError):
    status_code = 500


# =============================================================================
# INFRASTRUCTURE ERRORS
# =============================================================================

class DatabaseException(BudgetlyError):
    """Persistence layer failure."""
    pass


class ServiceException(BudgetlyError):
    """External service failure (hashing, tokens, email, AI)."""
    pass


def http_status_for(error: BaseException) -> int:
    """
    Map any error to the HTTP status a transport layer should answer with.

    Unknown errors are always 500 - we never guess.
    """
    if isinstance(error, InvalidParam):
        return 400
    if isinstance(error, HttpError):
        return error.status_code
    if isinstance(error, DatabaseException) and "not found" in str(error).lower():
        return 404
    return 500
