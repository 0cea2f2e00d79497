import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator
from functools import wraps

from pydantic import ValidationError
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from db import get_db_session, session_commit, session_rollback
from exceptions.backend import BackendException, BackendFormatException
from exceptions.base import GigaEatsException

logger = logging.getLogger(__name__)


class TransactionManager:
    """
    Utility class for backend transactions and for translating low-level
    backend errors into domain exceptions.
    """

    @staticmethod
    @asynccontextmanager
    async def atomic_transaction(session_factory=get_db_session) -> AsyncGenerator[Any, None]:
        """
        Context manager for a transaction in its own session.

        Usage:
            async with TransactionManager.atomic_transaction() as session:
                await session.execute(...)
        """
        session = None

        try:
            async with session_factory() as session:
                yield session
                await session_commit(session)
                logger.debug("Transaction committed successfully")

        except Exception as e:
            if session is not None:
                try:
                    await session_rollback(session)
                    logger.info(f"Transaction rolled back due to error: {str(e)}")
                except SQLAlchemyError as rollback_error:
                    logger.critical(f"Failed to rollback transaction: {str(rollback_error)}")
            raise

    @staticmethod
    def backend_call(operation: str):
        """
        Decorator for repository coroutines.

        Domain exceptions pass through unchanged. pydantic validation errors
        become BackendFormatException, SQLAlchemy and redis errors become
        BackendException with a user-friendly message.

        Args:
            operation: Name of the backend operation, used in logs and in the exception
        """

        def decorator(func):
            @wraps(func)
            async def wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except GigaEatsException:
                    raise
                except ValidationError as e:
                    errors = e.errors()
                    field = ".".join(str(part) for part in errors[0]["loc"]) if errors else "unknown"
                    logger.error(f"Malformed backend data in {operation}: {field}: {str(e)}")
                    raise BackendFormatException(field, reason=str(e)) from e
                except (SQLAlchemyError, RedisError) as e:
                    logger.error(f"Backend call {operation} failed: {str(e)}")
                    raise BackendException(
                        "Unable to reach the server. Please try again.",
                        operation=operation,
                        reason=str(e)
                    ) from e

            return wrapper
        return decorator
