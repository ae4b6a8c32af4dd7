"""Pytest configuration and fixtures."""

import os

# Set DEBUG=true for all tests BEFORE any subway imports
# This must be done before subway.core.config loads settings
os.environ["DEBUG"] = "true"
os.environ["OTEL_ENABLED"] = "false"
os.environ["SECRET_DATABASE_URL"] = "sqlite+aiosqlite://"

from collections.abc import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from subway.core.database import get_db
from subway.main import app
from subway.models import Base

from tests.fixtures.otel import (  # noqa: F401
    in_memory_span_exporter,
    otel_enabled_provider,
    reset_tracer_provider,
    test_tracer_provider,
)


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """
    Create an in-memory SQLite database with every table.

    StaticPool keeps a single connection alive so all sessions share the
    same in-memory database for the duration of the test.

    Yields:
        AsyncEngine bound to the fresh database
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """
    Database session for a single test.

    Configured like the application session factory (no expiry on commit,
    no autoflush) so services behave the same way as in production.

    Yields:
        Async SQLAlchemy session
    """
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """
    Async HTTP client whose requests use the test database session.

    Args:
        db_session: Database session fixture

    Yields:
        Async HTTP client configured for testing
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client() -> Generator[TestClient]:
    """
    FastAPI synchronous test client for endpoints that need no database.

    Yields:
        Synchronous test client with app context
    """
    with TestClient(app) as test_client:
        yield test_client
