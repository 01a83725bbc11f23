import logging
from functools import lru_cache

from finance_tracker.core.config import settings
from finance_tracker.db.base import ExpenseStorage, StorageError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_storage() -> ExpenseStorage:
    """FastAPI dependency returning the configured storage backend."""
    if settings.STORAGE_BACKEND == "memory":
        from finance_tracker.db.memory import MemoryStorage

        logger.info("Using in-memory storage")
        return MemoryStorage()

    from finance_tracker.db.dynamo import DynamoStorage

    logger.info(f"Using DynamoDB storage in {settings.DYNAMO_REGION}")
    return DynamoStorage()


__all__ = ["ExpenseStorage", "StorageError", "get_storage"]
