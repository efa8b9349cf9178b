from typing import Protocol
from domain.model.user import User, UserUpdate


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Every operation only sees enabled users. Failures are raised as
    domain errors (NotFoundError, DuplicateError, HashingError,
    StoreUnavailableError and its subclasses).
    """
    def create(self, user: User) -> str:
        """Persist a new user with a hashed password. Return the assigned ID."""
        ...

    def create_batch(self, users: list[User]) -> list[str]:
        """Persist many users in one insert. Return the assigned IDs in input order."""
        ...

    def get_by_id(self, user_id: str) -> User:
        """Find an enabled user by ID. Raise NotFoundError if absent or disabled."""
        ...

    def update(self, user_id: str, update: UserUpdate) -> User:
        """Atomically apply a partial update. Return the post-update User."""
        ...

    def delete(self, user_id: str) -> None:
        """Soft delete an enabled user."""
        ...
