from fastapi import Depends, HTTPException

from adapter.crypto.bcrypt_hasher import BcryptPasswordHasher
from adapter.mongodb import USERS_COLLECTION_NAME
from adapter.mongodb.connection import get_mongodb_client, DATABASE_NAME, OPERATION_TIMEOUT
from adapter.mongodb.user_repository import MongoUserRepository
from port.password_hasher import PasswordHasher
from port.user_collection import UserCollection
from port.user_repository import UserRepository
from services.user_rules import UserRules
from services.user_service import UserService

USER_RULES = UserRules()
_hasher = BcryptPasswordHasher()


def _get_db():
    """Get MongoDB database, raising 503 if unavailable."""
    client = get_mongodb_client()
    if client is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return client[DATABASE_NAME]


def get_user_collection() -> UserCollection:
    return _get_db()[USERS_COLLECTION_NAME]


def get_password_hasher() -> PasswordHasher:
    return _hasher


def get_user_repo(
    collection: UserCollection = Depends(get_user_collection),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserRepository:
    return MongoUserRepository(collection, hasher, timeout=OPERATION_TIMEOUT)


def get_user_service(repo: UserRepository = Depends(get_user_repo)) -> UserService:
    return UserService(repo, USER_RULES)
