"""
Base repository for the local sync-state database.

Provides session access over the shared ``ConnDB`` and a decorator that
logs every repository operation.
"""

import functools
import logging
from datetime import datetime, timezone
from typing import AsyncContextManager, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.connection import ConnDB, get_db_connection

logger = logging.getLogger(__name__)


def log_operation(operation_name: str = None) -> Callable:
    """
    Decorator for logging database operations.

    Args:
        operation_name: Optional custom name for the operation

    Returns:
        Decorated function with logging
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            op_name = operation_name or f"{self.__class__.__name__}.{func.__name__}"
            logger.debug(f"Starting operation: {op_name}")

            try:
                result = await func(self, *args, **kwargs)
                logger.debug(f"Operation successful: {op_name}")
                return result
            except Exception as e:
                logger.error(f"Operation failed: {op_name} - {e}")
                raise

        return wrapper

    return decorator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseRepository:
    """
    Base class for repositories of the sync-state tables.

    Args:
        conn_db: Database connection; defaults to the application-wide one
    """

    def __init__(self, conn_db: Optional[ConnDB] = None):
        self.conn_db: ConnDB = conn_db or get_db_connection()

    def get_session(self) -> AsyncContextManager[AsyncSession]:
        return self.conn_db.get_session()
