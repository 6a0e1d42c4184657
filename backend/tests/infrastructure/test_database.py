"""Database Session Manager — engine options, error mapping and health checks.

Tests:
    - Pool sizing only reaches server backends
    - SQLAlchemy failures leave a session as DatabaseError with the right operation
    - Domain errors raised inside a session pass through untouched
    - health_check answers True on a live engine and False on an unreachable one
"""

import pytest
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError

from capture_lines.core.errors import DatabaseError, DuplicateCodeError
from capture_lines.infrastructure.database import (
    DatabaseSessionManager, engine_options, to_database_error,
)

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def manager():
    m = DatabaseSessionManager(MEMORY_URL)
    yield m
    await m.dispose()


def test_server_backend_gets_pool_sizing():
    options = engine_options("postgresql+asyncpg://u:p@localhost/lines", 5, 2)
    assert options["pool_size"] == 5
    assert options["max_overflow"] == 2
    assert options["pool_pre_ping"] is True


def test_sqlite_keeps_default_pool():
    options = engine_options(MEMORY_URL, 5, 2)
    assert "pool_size" not in options
    assert "max_overflow" not in options


@pytest.mark.parametrize("exc, operation", [
    (OperationalError("SELECT 1", {}, ConnectionError("gone")), "execute"),
    (DBAPIError("SELECT 1", {}, Exception("driver")), "query"),
    (SQLAlchemyError("boom"), "unknown"),
])
def test_failure_mapping(exc, operation):
    error = to_database_error(exc)
    assert error.operation == operation
    assert error.code == "DATABASE_ERROR"
    assert error.http_status == 503


async def test_session_maps_operational_error(manager):
    with pytest.raises(DatabaseError) as exc_info:
        async with manager.session():
            raise OperationalError("SELECT 1", {}, ConnectionError("gone"))
    assert exc_info.value.operation == "execute"
    assert isinstance(exc_info.value.__cause__, OperationalError)


async def test_session_passes_domain_errors_through(manager):
    with pytest.raises(DuplicateCodeError):
        async with manager.session():
            raise DuplicateCodeError("1" * 27)


async def test_health_check_live(manager):
    assert await manager.health_check() is True


async def test_health_check_unreachable(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'lines.db'}"
    m = DatabaseSessionManager(url)
    try:
        assert await m.health_check() is False
    finally:
        await m.dispose()
