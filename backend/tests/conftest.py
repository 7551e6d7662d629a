"""
Customer API — Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for repository unit tests
    ├── engine:          In-memory SQLite engine with the schema created
    ├── session_factory: AsyncSession factory bound to `engine`
    ├── app:             Application built around `engine`
    ├── test_client:     HTTPX AsyncClient talking to `app` over ASGI
    └── customer_payload: A valid create payload
"""

import os

# Settings are read at import time; point them at SQLite before importing the app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["API_KEY"] = ""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from customer_api.database import Base, create_session_factory
from customer_api.main import create_app
from customer_api.resources import RESOURCES  # noqa: F401  (registers resource tables)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = None
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def engine():
    """
    In-memory SQLite engine shared by every session in the test.

    StaticPool keeps one connection open, so the in-memory database survives
    across sessions and requests.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def app(engine):
    return create_app(engine=engine)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed directly to the app through ASGITransport.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/customers")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def customer_payload():
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "description": "Prefers e-mail contact",
        "loyalty_points": 10,
        "birth_date": "1815-12-10",
    }
