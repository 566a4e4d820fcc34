"""
Authentication Tokens

Stateless signed tokens (JWT, HS256 by default) carrying:

    {"user_id": "<uuid>", "created_at": <epoch ms>, "jti": "<uuid>"}

DESIGN DECISION: Nothing is stored server-side. A token is valid while
`now <= created_at + expire_hours`, checked at verification time. That
check is ours rather than the JWT `exp` claim, so the validity window
can be changed in configuration and applies to tokens already issued.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import uuid4

import jwt

from budgetly.exceptions import InvalidParam, ServiceException, UnauthorizedError
from budgetly.models.value_objects import DateEpoch, Id


DEFAULT_EXPIRE_HOURS = 24


class TokenService(ABC):
    """Interface consumed by the auth use cases."""

    @abstractmethod
    def generate_token_for_user(self, user_id: Id) -> str:
        pass

    @abstractmethod
    def validate_token(self, user_id: Id, token: str) -> bool:
        """True only if `token` is authentic, unexpired and issued to `user_id`."""
        pass

    @abstractmethod
    def get_user_id_from_token(self, token: str) -> Id:
        """
        Raises:
            UnauthorizedError: If the token is forged, malformed or expired
        """
        pass


class JwtTokenService(TokenService):
    """
    TokenService backed by PyJWT.

    Args:
        secret: HMAC signing secret
        expire_hours: Validity window after issue
        algorithm: JWT algorithm
        clock: Returns the current UTC time. Injected by tests.
    """

    def __init__(
        self,
        secret: str,
        expire_hours: int = DEFAULT_EXPIRE_HOURS,
        algorithm: str = "HS256",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ServiceException("Token secret cannot be empty")
        self._secret = secret
        self._expire = timedelta(hours=expire_hours)
        self._algorithm = algorithm
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _now_ms(self) -> int:
        return DateEpoch(self._clock()).to_number()

    def generate_token_for_user(self, user_id: Id) -> str:
        identifier = str(user_id) if user_id is not None else ""
        if not identifier.strip():
            raise ServiceException("User identifier cannot be empty")

        payload = {
            "user_id": identifier,
            "created_at": self._now_ms(),
            "jti": str(uuid4()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def _decode(self, token: str) -> Optional[dict]:
        """Verified, unexpired payload, or None."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.PyJWTError:
            return None

        created_at = payload.get("created_at")
        if not isinstance(created_at, (int, float)) or not payload.get("user_id"):
            return None

        expires_at = created_at + self._expire // timedelta(milliseconds=1)
        if self._now_ms() > expires_at:
            return None
        return payload

    def validate_token(self, user_id: Id, token: str) -> bool:
        payload = self._decode(token)
        return payload is not None and payload["user_id"] == str(user_id)

    def get_user_id_from_token(self, token: str) -> Id:
        payload = self._decode(token)
        if payload is None:
            raise UnauthorizedError("Invalid token")
        try:
            return Id(payload["user_id"])
        except InvalidParam:
            raise UnauthorizedError("Invalid token")


def user_id_from_authorization_header(
    header: Optional[str],
    token_service: TokenService,
) -> Id:
    """
    Resolve the caller of a request from its `Authorization` header.

    Expects exactly "Bearer <token>".

    Raises:
        UnauthorizedError: With the reason the header was refused
    """
    if not header:
        raise UnauthorizedError("No token provided")

    parts = header.split(" ")
    if len(parts) != 2:
        raise UnauthorizedError("Token error")

    scheme, token = parts
    if scheme != "Bearer" or not token:
        raise UnauthorizedError("Token malformatted")

    return token_service.get_user_id_from_token(token)
