import math
import os
import logging
from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

logger = logging.getLogger(__name__)

# Set pymongo logger to WARNING to reduce noise from driver-level logs
pymongo_logger = logging.getLogger('pymongo')
pymongo_logger.setLevel(logging.WARNING)

# Both are required; the app refuses to start without them
MONGO_URL = os.getenv('MONGO_URL')
DATABASE_NAME = os.getenv('MONGO_DATABASE')
# Optional per-operation timeout in seconds (client-side, via pymongo.timeout)
OPERATION_TIMEOUT_SETTING = os.getenv('MONGO_OPERATION_TIMEOUT')


def parse_timeout(value: str | None) -> float | None:
    """Parse a timeout in seconds. None when unset, not a number or not positive."""
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if math.isfinite(seconds) and seconds > 0 else None


OPERATION_TIMEOUT = parse_timeout(OPERATION_TIMEOUT_SETTING)

_client_cache = None
_connection_attempted = False
_connection_failed = False


class MissingSettingError(RuntimeError):
    """Required MongoDB setting is not configured."""


class InvalidSettingError(RuntimeError):
    """MongoDB setting is present but unusable."""


def require_settings() -> None:
    """Check MongoDB settings before startup.

    Raises:
        MissingSettingError: MONGO_URL or MONGO_DATABASE is unset
        InvalidSettingError: MONGO_OPERATION_TIMEOUT is set but not a positive number
    """
    if not MONGO_URL:
        raise MissingSettingError("MONGO_URL is not set")
    if not DATABASE_NAME:
        raise MissingSettingError("MONGO_DATABASE is not set")
    if OPERATION_TIMEOUT_SETTING and OPERATION_TIMEOUT is None:
        raise InvalidSettingError(
            f"MONGO_OPERATION_TIMEOUT must be a positive number of seconds, got '{OPERATION_TIMEOUT_SETTING}'"
        )


def reset_client():
    global _client_cache, _connection_attempted, _connection_failed
    _client_cache = None
    _connection_attempted = False
    _connection_failed = False


def close_client() -> None:
    """Close the cached client. Called on application shutdown."""
    global _client_cache
    if _client_cache is None:
        return
    try:
        _client_cache.close()
        logger.info("[MONGODB] Connection closed")
    except PyMongoError as e:
        logger.error("[MONGODB] Failed closing connection", extra={"error": str(e)})
    finally:
        _client_cache = None


def get_mongodb_client() -> MongoClient | None:
    """Get MongoDB client with connection caching and reconnection logic.

    Connection strategy:
    1. Return cached client if healthy (ping succeeds)
    2. If cached client fails, attempt reconnection
    3. If initial connection failed (config issue), don't retry

    Returns:
        MongoDB client or None if connection fails
    """
    global _client_cache, _connection_attempted, _connection_failed

    # Fast path: return cached client if healthy
    if _client_cache:
        try:
            _client_cache.admin.command('ping')
            return _client_cache
        except PyMongoError:
            _client_cache = None
            logger.debug("[MONGODB] Cached client failed ping, attempting reconnection...")

    if _connection_failed:
        return None

    if not MONGO_URL:
        logger.error("[MONGODB] MONGO_URL not configured.")
        _connection_failed = True
        return None

    try:
        client = MongoClient(
            MONGO_URL,
            serverSelectionTimeoutMS=10000,  # 10s, matches connect timeout
            connectTimeoutMS=10000,
            socketTimeoutMS=30000,
            maxPoolSize=10,
            minPoolSize=0,
            maxIdleTimeMS=30000,
            waitQueueTimeoutMS=10000,
            # Writes are not retried: callers own retry decisions
            retryWrites=False,
            retryReads=True,
        )
        client.admin.command('ping')

        is_first_connection = not _connection_attempted
        _connection_attempted = True
        _client_cache = client

        if is_first_connection:
            logger.info(f"[MONGODB] Connected successfully to {DATABASE_NAME}")

        return client
    except (ConnectionFailure, PyMongoError) as e:
        if not _connection_attempted:
            error_msg = str(e)[:200]
            logger.error(f"[MONGODB] Initial connection failed: {error_msg}")
            _connection_failed = True
        return None
