"""bcrypt implementation of PasswordHasher."""

import os
from logging import getLogger

import bcrypt

from domain.model.errors import HashingError

logger = getLogger(__name__)

# 2^12 iterations; override with BCRYPT_ROUNDS
DEFAULT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))


class BcryptPasswordHasher:
    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Bcrypt hash as string (salt and cost embedded)

        Raises:
            HashingError: invalid cost factor or password bcrypt cannot accept
        """
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")
        except (ValueError, TypeError) as e:
            logger.error("Password hashing failed", extra={"rounds": self.rounds, "error": str(e)})
            raise HashingError("Failed to hash password", details=str(e)) from e

    def verify(self, password: str, hashed: str) -> bool:
        """Verify password against hash.

        Returns False on mismatch. Raises HashingError if ``hashed`` is not a
        bcrypt hash.
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError as e:
            raise HashingError("Stored password hash is malformed", details=str(e)) from e
