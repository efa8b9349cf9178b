"""MongoDB index management utilities.

Index creation with conflict resolution, called at app startup.
"""

from logging import getLogger

from pymongo.errors import PyMongoError

from adapter.mongodb import USERS_COLLECTION_NAME

logger = getLogger(__name__)

# Uniqueness only applies to live users so a soft-deleted user's
# email and userName can be taken by a new account.
ENABLED_ONLY = {'partialFilterExpression': {'enabled': True}}


def create_index_safe(collection, keys: list, name: str, **kwargs) -> bool:
    """Create index with conflict resolution.

    Handles two conflict scenarios:
    - Same name but different key spec or options (schema migration)
    - Same key spec but different name (rename)

    In both cases, drops the conflicting index and recreates with the desired spec.
    """
    try:
        collection.create_index(keys, name=name, **kwargs)
        return True
    except PyMongoError as e:
        if "already exists" not in str(e) and "Conflict" not in str(e):
            raise
        return _resolve_conflict(collection, keys, name, **kwargs)


def _resolve_conflict(collection, keys: list, name: str, **kwargs) -> bool:
    """Drop conflicting index and recreate."""
    keys_dict = dict(keys)

    for idx_name, idx_info in collection.index_information().items():
        if idx_name == '_id_':
            continue

        idx_keys = dict(idx_info.get('key', []))
        same_name = idx_name == name
        same_keys = idx_keys == keys_dict

        # An unscoped unique index on the same key blocks the partial one
        if same_name or same_keys:
            logger.warning(f"Dropping conflicting index: {idx_name}")
            collection.drop_index(idx_name)
            collection.create_index(keys, name=name, **kwargs)
            logger.info(f"Recreated index: {name}")
            return True

    logger.error(f"Failed to resolve index conflict for {name}")
    return False


def ensure_user_indexes(collection) -> bool:
    """Create the independent unique indexes on email and userName."""
    try:
        results = [
            create_index_safe(collection, [('email', 1)], 'idx_users_email', unique=True, **ENABLED_ONLY),
            create_index_safe(collection, [('userName', 1)], 'idx_users_username', unique=True, **ENABLED_ONLY),
        ]
        return all(results)
    except PyMongoError as e:
        logger.error("Failed to create users indexes", extra={"error": str(e)})
        return False


def ensure_all_indexes(db) -> bool:
    """Ensure indexes for all collections. Called at app startup."""
    return ensure_user_indexes(db[USERS_COLLECTION_NAME])
