"""
Tests for the exception hierarchy and HTTP status mapping.
"""

import pytest

from budgetly.exceptions import (
    BadRequestError,
    BudgetlyError,
    DatabaseException,
    ForbiddenError,
    InternalServerError,
    InvalidParam,
    NotFoundError,
    ServiceException,
    UnauthorizedError,
    http_status_for,
)


class TestInvalidParam:

    def test_default_message(self):
        error = InvalidParam("abc")
        assert str(error) == "abc is invalid"
        assert error.value == "abc"

    def test_custom_message(self):
        assert str(InvalidParam(2, "Invalid number: 2. Expected 0 or 1.")).startswith("Invalid number")

    def test_not_a_value_error(self):
        """InvalidParam must escape pydantic validation unwrapped."""
        assert not issubclass(InvalidParam, ValueError)
        assert issubclass(InvalidParam, BudgetlyError)


class TestHttpStatus:

    @pytest.mark.parametrize("error, status", [
        (BadRequestError("Missing required parameter: email"), 400),
        (UnauthorizedError("Invalid credentials"), 401),
        (ForbiddenError("Forbidden"), 403),
        (NotFoundError("User not found"), 404),
        (InternalServerError("boom"), 500),
        (InvalidParam("x"), 400),
        (DatabaseException("Bill not found: 123"), 404),
        (DatabaseException("connection lost"), 500),
        (ServiceException("SMTP down"), 500),
        (RuntimeError("unexpected"), 500),
    ])
    def test_mapping(self, error, status):
        assert http_status_for(error) == status

    def test_message_attribute(self):
        assert NotFoundError("User not found").message == "User not found"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
