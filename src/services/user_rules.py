"""Validation rules for inbound user data.

Each field is checked independently and reports at most one violation, the
first rule it fails. All fields are always checked.
"""

import re
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from domain.model.user import FieldViolation, User, UserUpdate

SPECIAL_CHARACTERS = "@$!%*?&"


@dataclass(frozen=True)
class UserRules:
    """Immutable rule set passed to UserService at construction."""
    min_password_length: int = 8
    # bcrypt only accepts the first 72 bytes of input
    max_password_bytes: int = 72
    special_characters: str = SPECIAL_CHARACTERS

    def validate(self, user: User) -> list[FieldViolation]:
        """Validate a complete user record. Empty list means valid."""
        checks = [
            self._check_required('name', user.name),
            self._check_email(user.email),
            self._check_required('userName', user.user_name),
            self._check_password(user.password),
        ]
        return [v for v in checks if v]

    def validate_update(self, update: UserUpdate) -> list[FieldViolation]:
        """Validate only the fields present in a partial update."""
        checks = []
        if update.name is not None:
            checks.append(self._check_required('name', update.name))
        if update.email is not None:
            checks.append(self._check_email(update.email))
        if update.user_name is not None:
            checks.append(self._check_required('userName', update.user_name))
        if update.password is not None:
            checks.append(self._check_password(update.password))
        return [v for v in checks if v]

    # ── rules ────────────────────────────────────────────────

    @staticmethod
    def _check_required(field: str, value: str | None) -> FieldViolation | None:
        if value is None or not value.strip():
            return FieldViolation(field, 'required', f"{field} is required")
        return None

    def _check_email(self, email: str | None) -> FieldViolation | None:
        missing = self._check_required('email', email)
        if missing:
            return missing
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError as e:
            return FieldViolation('email', 'email', str(e))
        return None

    def _check_password(self, password: str | None) -> FieldViolation | None:
        # Not stripped: whitespace is a legal password character
        if not password:
            return FieldViolation('password', 'required', "password is required")
        if len(password) < self.min_password_length:
            return FieldViolation(
                'password', 'min',
                f"Password must be at least {self.min_password_length} characters",
            )
        if len(password.encode('utf-8')) > self.max_password_bytes:
            return FieldViolation(
                'password', 'max',
                f"Password must be at most {self.max_password_bytes} bytes",
            )
        if not self.is_complex(password):
            return FieldViolation(
                'password', 'password',
                "Password must contain an uppercase letter, a lowercase letter, "
                f"a number and one of {self.special_characters}",
            )
        return None

    def is_complex(self, password: str) -> bool:
        """True if the password has a lowercase, uppercase, digit and special character."""
        return all((
            re.search(r'[a-z]', password),
            re.search(r'[A-Z]', password),
            re.search(r'\d', password),
            re.search(f'[{re.escape(self.special_characters)}]', password),
        ))
