"""Domain-level exceptions.

Services and repositories raise these errors to express business rule
violations and classified store failures. Route handlers catch them and map
to appropriate HTTP status codes using ``code``.
"""

from domain.model.user import FieldViolation


class DomainError(Exception):
    """Base class for all domain errors."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str = "", details: str | None = None):
        self.message = message or self.__class__.__doc__ or ""
        self.details = details
        super().__init__(self.message)


class ValidationError(DomainError):
    """Input violates a business validation rule."""

    code = "VALIDATION_FAILURE"

    def __init__(self, message: str = "Invalid user input", violations: list[FieldViolation] | None = None):
        self.violations = violations or []
        super().__init__(message)


class NotFoundError(DomainError):
    """Requested entity does not exist."""

    code = "NOT_FOUND"


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""

    code = "DUPLICATE_KEY"

    def __init__(self, message: str = "User already exists", details: str | None = None,
                 inserted_ids: list[str] | None = None):
        # Batch inserts are ordered: ids written before the collision persist
        self.inserted_ids = inserted_ids or []
        super().__init__(message, details)


class HashingError(DomainError):
    """Password hashing primitive failed."""

    code = "HASHING_FAILURE"


class StoreUnavailableError(DomainError):
    """Document store failed to complete the operation."""

    code = "STORE_UNAVAILABLE"


class CanceledError(StoreUnavailableError):
    """Store operation was interrupted before completing."""

    code = "CANCELED"


class DeadlineExceededError(StoreUnavailableError):
    """Store operation did not finish within its time limit."""

    code = "DEADLINE_EXCEEDED"


class UnsupportedFormatError(DomainError):
    """Uploaded file is not in an accepted format."""

    code = "UNSUPPORTED_FORMAT"


class MalformedInputError(DomainError):
    """Uploaded file could not be parsed."""

    code = "MALFORMED_INPUT"
