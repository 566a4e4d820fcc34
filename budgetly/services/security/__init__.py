"""Password hashing and authentication tokens."""

from budgetly.services.security.password_hasher import (
    BcryptPasswordHasher,
    PasswordHasher,
)
from budgetly.services.security.token_service import (
    JwtTokenService,
    TokenService,
    user_id_from_authorization_header,
)

__all__ = [
    "BcryptPasswordHasher",
    "JwtTokenService",
    "PasswordHasher",
    "TokenService",
    "user_id_from_authorization_header",
]
