"""
Password Hashing

One-way, salted hashing of user passwords with bcrypt.

bcrypt is CPU-bound, so both calls run in a worker thread.
"""

import asyncio
from abc import ABC, abstractmethod

import bcrypt

from budgetly.exceptions import ServiceException


DEFAULT_SALT_ROUNDS = 12


class PasswordHasher(ABC):
    """Interface consumed by the auth use cases."""

    @abstractmethod
    async def encrypt(self, password: str) -> str:
        """Return a salted one-way hash of `password`."""
        pass

    @abstractmethod
    async def verify_password(self, password: str, hashed: str) -> bool:
        """True if `password` produces `hashed`."""
        pass


class BcryptPasswordHasher(PasswordHasher):

    def __init__(self, salt_rounds: int = DEFAULT_SALT_ROUNDS):
        self._salt_rounds = salt_rounds

    def _hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._salt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    async def encrypt(self, password: str) -> str:
        try:
            return await asyncio.to_thread(self._hash, password)
        except (ValueError, TypeError) as e:
            raise ServiceException(f"Failed to hash password: {e}")

    async def verify_password(self, password: str, hashed: str) -> bool:
        try:
            return await asyncio.to_thread(
                bcrypt.checkpw,
                password.encode("utf-8"),
                hashed.encode("utf-8"),
            )
        except (ValueError, TypeError) as e:
            # Malformed stored hash
            raise ServiceException(f"Failed to verify password: {e}")
