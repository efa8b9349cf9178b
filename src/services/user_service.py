"""User service — validate, then delegate to the repository.

Pure business logic with no HTTP dependencies.
Raises domain errors that route handlers map to HTTP status codes.
"""

import logging
from dataclasses import replace
from typing import Iterable

from domain.model.errors import ValidationError
from domain.model.user import User, UserUpdate
from port.user_repository import UserRepository
from services.user_rules import UserRules

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, repo: UserRepository, rules: UserRules):
        self.repo = repo
        self.rules = rules

    def create_user(self, user: User) -> str:
        """Create a user and return its ID.

        Raises:
            ValidationError: one or more fields break a rule
            DuplicateError: email or userName taken by an enabled user
        """
        violations = self.rules.validate(user)
        if violations:
            raise ValidationError(violations=violations)
        return self.repo.create(user)

    def create_user_batch(self, users: Iterable[User]) -> list[str]:
        """Create many users at once. Any invalid row rejects the whole batch."""
        users = list(users)
        if not users:
            raise ValidationError("No users to create")

        violations = []
        for row, user in enumerate(users, start=1):
            violations.extend(replace(v, row=row) for v in self.rules.validate(user))
        if violations:
            logger.info("Batch rejected", extra={"rows": len(users), "violations": len(violations)})
            raise ValidationError(violations=violations)

        return self.repo.create_batch(users)

    def get_user(self, user_id: str) -> User:
        return self.repo.get_by_id(user_id)

    def update_user(self, user_id: str, update: UserUpdate) -> User:
        """Update the supplied fields and return the updated user."""
        if update.is_empty():
            raise ValidationError("No fields to update")
        violations = self.rules.validate_update(update)
        if violations:
            raise ValidationError(violations=violations)
        return self.repo.update(user_id, update)

    def delete_user(self, user_id: str) -> None:
        self.repo.delete(user_id)
