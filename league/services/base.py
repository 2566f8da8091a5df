"""
Base service class for the league engine.

Services share one async session factory. Reads that hit a transient
database failure (a locked SQLite file, a dropped connection) are retried
with exponential backoff; any other exception propagates on the first
attempt.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable, Tuple, Type

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

class BaseService:
    """Base class for services reading through an async session factory."""

    # Locked files and dropped connections; constraint violations are not retried
    RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (OperationalError, InterfaceError)
    MAX_RETRIES = 3
    RETRY_BASE_DELAY = 0.1

    def __init__(self, session_factory):
        """
        Args:
            session_factory: ``async_sessionmaker`` from ``Database.async_session``
        """
        self.session_factory = session_factory

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session scope that commits on success and rolls back on error."""
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def execute_with_retry(self, func: Callable[[], Awaitable[Any]],
                                 max_retries: int = None) -> Any:
        """
        Await ``func()``, retrying transient database errors.

        Raises:
            The last database error once ``max_retries`` attempts have failed,
            or any non-database error immediately
        """
        attempts = max_retries or self.MAX_RETRIES
        name = getattr(func, '__name__', repr(func))
        for attempt in range(1, attempts + 1):
            try:
                return await func()
            except self.RETRYABLE_ERRORS as e:
                if attempt == attempts:
                    logger.error(f"{name} failed after {attempts} attempts: {e}")
                    raise
                delay = self.RETRY_BASE_DELAY * (2 ** (attempt - 1))
                logger.warning(f"Database error in {name} (attempt {attempt}/{attempts}), retrying in {delay:.1f}s: {e}")
                await asyncio.sleep(delay)
