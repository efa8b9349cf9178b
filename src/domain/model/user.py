from dataclasses import dataclass, fields
from datetime import datetime


@dataclass
class User:
    """Domain model representing a user.

    ``password`` holds the plaintext on the way in and the bcrypt hash once
    the record has been persisted. It is never part of an API projection.
    """
    name: str
    email: str
    user_name: str
    password: str | None = None
    id: str | None = None
    enabled: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


@dataclass(frozen=True)
class UserUpdate:
    """Partial update of the mutable user fields. ``None`` leaves a field unchanged."""
    name: str | None = None
    email: str | None = None
    user_name: str | None = None
    password: str | None = None

    def supplied(self) -> dict[str, str]:
        """Return only the fields the caller set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.supplied()


@dataclass(frozen=True)
class FieldViolation:
    """A single failed validation rule."""
    field: str
    rule: str
    message: str
    row: int | None = None
