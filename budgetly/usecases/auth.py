"""
Login

Exchanges an email and a plaintext password for a signed token.

Failure messages are part of the API surface:
- "User not found"           (404) no user with that email
- "User password not found"  (401) user exists but has no active password
- "Invalid credentials"      (401) password doesn't match
"""

from typing import Optional, Union

from pydantic import BaseModel

from budgetly.audit import AuditLogger
from budgetly.exceptions import NotFoundError, UnauthorizedError
from budgetly.models.entities import User
from budgetly.models.value_objects import Email, Password
from budgetly.services.security import PasswordHasher, TokenService
from budgetly.services.storage.interface import (
    PasswordQueryRepository,
    UserQueryRepository,
)


class LoginResult(BaseModel):
    user: User
    token: str


class Login:

    def __init__(
        self,
        user_query: UserQueryRepository,
        password_query: PasswordQueryRepository,
        hasher: PasswordHasher,
        token_service: TokenService,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._user_query = user_query
        self._password_query = password_query
        self._hasher = hasher
        self._token_service = token_service
        self._audit_logger = audit_logger

    async def _failed(
        self,
        error: Exception,
        email: Email,
        user_id: Optional[str] = None,
    ) -> Exception:
        if self._audit_logger:
            await self._audit_logger.log_login_failed(str(email), str(error), user_id)
        return error

    async def execute(
        self,
        email: Union[Email, str],
        password: Union[Password, str],
    ) -> LoginResult:
        email = email if isinstance(email, Email) else Email(email)

        user = await self._user_query.get_by_email(email)
        if user is None:
            raise await self._failed(NotFoundError("User not found"), email)

        user_id = str(user.id)
        password_record = await self._password_query.find(
            {"user_id": user_id, "active": True}
        )
        if password_record is None:
            raise await self._failed(UnauthorizedError("User password not found"), email, user_id)

        is_valid = await self._hasher.verify_password(
            str(password), str(password_record.password)
        )
        if not is_valid:
            raise await self._failed(UnauthorizedError("Invalid credentials"), email, user_id)

        token = self._token_service.generate_token_for_user(user.id)

        if self._audit_logger:
            await self._audit_logger.log_login_succeeded(user_id)

        return LoginResult(user=user, token=token)
