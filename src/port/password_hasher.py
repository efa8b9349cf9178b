from typing import Protocol


class PasswordHasher(Protocol):
    """Protocol for one-way password hashing."""
    def hash(self, password: str) -> str:
        """Return a salted hash of the password. Raise HashingError on failure."""
        ...

    def verify(self, password: str, hashed: str) -> bool:
        """Return True if the password matches the stored hash."""
        ...
