"""Database Session Manager — async engine and sessions for the capture line store.

Invariants:
    - A session that raises is rolled back before it is closed
    - Driver and SQLAlchemy failures leave this module as DatabaseError (503)
    - Primary-key collisions never reach here: the repository commits inside the
      session and turns IntegrityError into DuplicateCodeError itself
    - Pool sizing applies to server databases only; SQLite keeps its default pool

Design Decisions:
    - Singleton db_manager initialized in the FastAPI lifespan
    - expire_on_commit=False: records are copied out of rows after commit
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from capture_lines.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# Most specific first: OperationalError is a DBAPIError is a SQLAlchemyError
_FAILURES: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "unknown"),
)


def to_database_error(exc: SQLAlchemyError) -> DatabaseError:
    """Map a SQLAlchemy exception onto the domain DatabaseError."""
    for exc_type, message, operation in _FAILURES:
        if isinstance(exc, exc_type):
            return DatabaseError(message, operation)
    return DatabaseError("Database operation failed", "unknown")


def engine_options(
    database_url: str, pool_size: int = 20, max_overflow: int = 10,
) -> dict[str, Any]:
    """Keyword arguments for create_async_engine given the target backend."""
    options: dict[str, Any] = {"pool_pre_ping": True}
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_recycle=3600,
        )
    return options


class DatabaseSessionManager:
    """Owns the engine behind the capture line repository."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url,
            **engine_options(database_url, pool_size, max_overflow),
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = to_database_error(e)
            logger.error(
                f"DB {error.operation} failed: {e}",
                extra={"error_code": error.code},
            )
            raise error from e
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """SELECT 1 through a fresh session; False on any database failure."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except (DatabaseError, OSError) as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def close_db() -> None:
    global db_manager
    if db_manager:
        await db_manager.dispose()
        db_manager = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a session for one request."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
