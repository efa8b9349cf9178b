"""Deterministic implementation of PasswordHasher for testing."""

from domain.model.errors import HashingError

PREFIX = "fakehash$"


class FakePasswordHasher:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[str] = []

    def hash(self, password: str) -> str:
        self.calls.append(password)
        if self.fail:
            raise HashingError("Failed to hash password")
        return PREFIX + password[::-1]

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed.startswith(PREFIX):
            raise HashingError("Stored password hash is malformed")
        return hashed == PREFIX + password[::-1]
