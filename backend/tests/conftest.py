"""
Xync Backend — Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (foreign keys ON,
       so the CASCADE / SET NULL rules behave as on PostgreSQL) and an HTTPX
       client bound to the app with the session dependency overridden.

Fixture Hierarchy (all function-scoped):
    engine ──▶ session_factory ──┬──▶ db_session    direct service/ORM access
                                 └──▶ test_client   HTTP access through the app
    register_user / auth_headers helpers build authenticated callers
"""

import os

# Settings are read at import time, so the environment must be in place
# before anything from xync is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-0123456789abcdef0123456789abcdef"
os.environ["JWT_EXPIRATION_HOURS"] = "24"
os.environ["STORAGE_RETRY_WAIT"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from xync.database import Base, build_engine, get_db_session
from xync.models.user import User  # noqa: F401
from xync.models.category import Category  # noqa: F401
from xync.models.tag import Tag  # noqa: F401
from xync.models.bookmark import Bookmark  # noqa: F401
from xync.models.note import Note  # noqa: F401

DEFAULT_PASSWORD = "correct horse battery"


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    """
    In-memory SQLite engine with the full schema.

    StaticPool keeps a single connection alive so every session in the test
    sees the same in-memory database.
    """
    eng = build_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock async session for unit tests that never reach a database.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from xync.main import app

    async def override_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def register(client: AsyncClient, email: str, password: str = DEFAULT_PASSWORD, name: str = "Test User"):
    return await client.post(
        "/auth/register",
        json={"email": email, "password": password, "name": name},
    )


@pytest.fixture
def register_user(test_client):
    """
    Factory fixture: registers a fresh user and returns
    {"id", "email", "token", "headers"}.
    """

    async def _register(email: str = "") -> Dict[str, Any]:
        email = email or f"user-{uuid4().hex[:8]}@x.com"
        response = await register(test_client, email)
        assert response.status_code == 201, response.text
        body = response.json()
        return {
            "id": body["user"]["id"],
            "email": body["user"]["email"],
            "token": body["token"],
            "headers": {"Authorization": f"Bearer {body['token']}"},
        }

    return _register


@pytest_asyncio.fixture
async def alice(register_user):
    return await register_user("alice@x.com")


@pytest_asyncio.fixture
async def bob(register_user):
    return await register_user("bob@x.com")
