"""Service test fixtures — async DB, deterministic codec, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe hits the test engine
    - The service fixture runs on a fixed clock (2026-01-28 10:00, Mexico City)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for service and route tests
      (PostgreSQL-specific features not exercised here)
"""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from capture_lines.core.codec import CaptureLineCodec
from capture_lines.core.issuance_config import IssuanceConfig
from capture_lines.db.base import Base
from capture_lines.infrastructure.capture_line_repository import SqlCaptureLineRepository
from capture_lines.infrastructure.database import get_db, DatabaseSessionManager
import capture_lines.infrastructure.database as db_module
from capture_lines.main import app
from capture_lines.services.capture_line_service import CaptureLineService

FIXED_NOW = datetime(2026, 1, 28, 10, 0, tzinfo=ZoneInfo("America/Mexico_City"))


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def config():
    return IssuanceConfig()


@pytest.fixture
def codec(config):
    return CaptureLineCodec(config, clock=lambda: FIXED_NOW)


@pytest.fixture
def repository(test_db):
    return SqlCaptureLineRepository(test_db)


@pytest.fixture
def service(repository, codec, config):
    return CaptureLineService(repository, codec, config)


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
