"""MongoDB implementation of UserRepository.

Soft delete: a user is live while ``enabled`` is true. Every query goes
through ``_live()`` so disabled documents are never read or written.
Updates and deletes are a single ``find_one_and_update`` each; uniqueness of
``email`` and ``userName`` is left to the partial unique indexes and
detected when the write fails.
"""

import uuid
from contextlib import nullcontext
from datetime import datetime, timezone
from logging import getLogger

import pymongo
from pymongo import ReturnDocument
from pymongo.errors import (
    BulkWriteError,
    DuplicateKeyError,
    ExecutionTimeout,
    OperationFailure,
    PyMongoError,
)

from domain.model.errors import (
    CanceledError,
    DeadlineExceededError,
    DomainError,
    DuplicateError,
    NotFoundError,
    StoreUnavailableError,
)
from domain.model.user import User, UserUpdate
from port.password_hasher import PasswordHasher
from port.user_collection import UserCollection

logger = getLogger(__name__)

DUPLICATE_KEY_CODE = 11000
# Interrupted, InterruptedAtShutdown, InterruptedDueToReplStateChange
INTERRUPTED_CODES = {11600, 11601, 11602}

# Domain attribute -> document field
FIELD_NAMES = {
    'name': 'name',
    'email': 'email',
    'user_name': 'userName',
    'password': 'password',
}


def _now() -> datetime:
    """Current UTC time truncated to milliseconds, the precision BSON dates keep.

    Two writes within the same millisecond get the same timestamp.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _live(user_id: str) -> dict:
    """Filter matching the user only while it is enabled."""
    return {'_id': user_id, 'enabled': True}


def _is_duplicate(e: PyMongoError) -> bool:
    if isinstance(e, DuplicateKeyError):
        return True
    if isinstance(e, BulkWriteError):
        return any(err.get('code') == DUPLICATE_KEY_CODE for err in e.details.get('writeErrors', []))
    return False


def classify_error(e: PyMongoError, message: str) -> DomainError:
    """Map a driver error onto the domain error taxonomy."""
    details = str(e)[:500]
    if _is_duplicate(e):
        return DuplicateError("Email or userName already in use", details=details)
    if isinstance(e, ExecutionTimeout) or getattr(e, 'timeout', False):
        return DeadlineExceededError(message, details=details)
    if isinstance(e, OperationFailure) and e.code in INTERRUPTED_CODES:
        return CanceledError(message, details=details)
    return StoreUnavailableError(message, details=details)


class MongoUserRepository:
    def __init__(self, collection: UserCollection, hasher: PasswordHasher, timeout: float | None = None):
        self.collection = collection
        self.hasher = hasher
        self.timeout = timeout

    # ── helpers ──────────────────────────────────────────────

    def _deadline(self):
        """Client-side operation deadline. Nests inside a caller's pymongo.timeout()."""
        if self.timeout is None:
            return nullcontext()
        return pymongo.timeout(self.timeout)

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            name=doc['name'],
            email=doc['email'],
            user_name=doc['userName'],
            password=doc.get('password'),
            enabled=doc.get('enabled', False),
            created_at=doc.get('createdAt'),
            updated_at=doc.get('updatedAt'),
            deleted_at=doc.get('deletedAt'),
        )

    def _to_document(self, user: User, now: datetime) -> dict:
        """Build a new user document: fresh id, timestamps, hashed password."""
        return {
            '_id': uuid.uuid4().hex,
            'name': user.name,
            'email': user.email,
            'userName': user.user_name,
            'password': self.hasher.hash(user.password or ''),
            'enabled': True,
            'createdAt': now,
            'updatedAt': now,
            'deletedAt': None,
        }

    # ── write operations ─────────────────────────────────────

    def create(self, user: User) -> str:
        """Insert a new enabled user and return its ID."""
        doc = self._to_document(user, _now())
        try:
            with self._deadline():
                self.collection.insert_one(doc)
        except PyMongoError as e:
            error = classify_error(e, "Failed to create user")
            if isinstance(error, DuplicateError):
                logger.warning("User creation failed: duplicate key", extra={"email": user.email, "userName": user.user_name})
            else:
                logger.error("Failed to create user", extra={"code": error.code, "error": str(e)})
            raise error from e

        logger.info("User created", extra={"userId": doc['_id']})
        return doc['_id']

    def create_batch(self, users: list[User]) -> list[str]:
        """Insert many users with one ordered insert_many.

        Every document is prepared (and every password hashed) before anything
        is written, so a hashing failure leaves the store untouched. On a
        duplicate, documents ahead of the offending one stay inserted.
        """
        if not users:
            return []

        now = _now()
        docs = [self._to_document(user, now) for user in users]
        ids = [doc['_id'] for doc in docs]

        try:
            with self._deadline():
                self.collection.insert_many(docs, ordered=True)
        except PyMongoError as e:
            error = classify_error(e, "Failed to create users")
            if isinstance(e, BulkWriteError):
                inserted = ids[:e.details.get('nInserted', 0)]
                if isinstance(error, DuplicateError):
                    error.inserted_ids = inserted
                logger.warning("Batch insert stopped", extra={
                    "code": error.code, "inserted": len(inserted), "total": len(docs),
                })
            else:
                logger.error("Failed to create users", extra={"code": error.code, "error": str(e)})
            raise error from e

        logger.info("Users created", extra={"count": len(ids)})
        return ids

    def update(self, user_id: str, update: UserUpdate) -> User:
        """Apply a partial update to an enabled user and return the post-image."""
        changes = {FIELD_NAMES[key]: value for key, value in update.supplied().items()}
        if 'password' in changes:
            changes['password'] = self.hasher.hash(changes['password'])
        changes['updatedAt'] = _now()

        try:
            with self._deadline():
                doc = self.collection.find_one_and_update(
                    _live(user_id),
                    {'$set': changes},
                    return_document=ReturnDocument.AFTER,
                )
        except PyMongoError as e:
            error = classify_error(e, "Failed to update user")
            logger.error("Failed to update user", extra={"userId": user_id, "code": error.code, "error": str(e)})
            raise error from e

        if doc is None:
            logger.warning("User not found for update", extra={"userId": user_id})
            raise NotFoundError("User not found")

        logger.info("User updated", extra={"userId": user_id, "fields": sorted(k for k in changes if k != 'password')})
        return self._to_domain(doc)

    def delete(self, user_id: str) -> None:
        """Soft delete: disable the user and stamp deletedAt."""
        now = _now()
        try:
            with self._deadline():
                doc = self.collection.find_one_and_update(
                    _live(user_id),
                    {'$set': {'enabled': False, 'deletedAt': now, 'updatedAt': now}},
                )
        except PyMongoError as e:
            error = classify_error(e, "Failed to delete user")
            logger.error("Failed to delete user", extra={"userId": user_id, "code": error.code, "error": str(e)})
            raise error from e

        if doc is None:
            logger.warning("User not found for deletion", extra={"userId": user_id})
            raise NotFoundError("User not found")

        logger.info("User soft deleted", extra={"userId": user_id})

    # ── read operations ──────────────────────────────────────

    def get_by_id(self, user_id: str) -> User:
        """Find an enabled user by ID."""
        try:
            with self._deadline():
                doc = self.collection.find_one(_live(user_id))
        except PyMongoError as e:
            error = classify_error(e, "Failed to get user")
            logger.error("Failed to get user by ID", extra={"userId": user_id, "code": error.code, "error": str(e)})
            raise error from e

        if doc is None:
            raise NotFoundError("User not found")
        return self._to_domain(doc)
