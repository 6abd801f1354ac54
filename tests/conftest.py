"""
Storefront API — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Route tests run the real app against an in-memory SQLite database
       (aiosqlite + StaticPool, so every session sees the same connection);
       service unit tests use a mocked AsyncSession instead.

Fixture Hierarchy:
    Function-scoped:
    ├── db_engine / session_factory: fresh in-memory schema per test
    ├── app: create_app() with get_db_session overridden
    ├── client: HTTPX AsyncClient over ASGITransport
    ├── admin_headers / user_headers: bearer tokens for seeded users
    ├── mock_db_session: AsyncMock session for unit tests
    └── product_payload: a valid product body
"""

import os

# Must be set before any storefront import reads settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

from typing import AsyncGenerator, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront.auth import hash_token
from storefront.database import Base, get_db_session
from storefront.main import create_app
from storefront.models import User

ADMIN_TOKEN = "admin-token-for-tests"
SUPER_ADMIN_TOKEN = "super-admin-token-for-tests"
USER_TOKEN = "user-token-for-tests"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def seeded_users(session_factory) -> Dict[str, User]:
    users = {
        "admin": User(email="admin@example.com", name="Admin", role="admin",
                      token_hash=hash_token(ADMIN_TOKEN)),
        "super-admin": User(email="root@example.com", name="Root", role="super-admin",
                            token_hash=hash_token(SUPER_ADMIN_TOKEN)),
        "user": User(email="shopper@example.com", name="Shopper", role="user",
                     token_hash=hash_token(USER_TOKEN)),
    }
    async with session_factory() as session:
        session.add_all(users.values())
        await session.commit()
    return users


# ══════════════════════════════════════════════════════════════════════════
# Application
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(session_factory):
    application = create_app()

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_get_db_session
    return application


@pytest_asyncio.fixture
async def client(app, seeded_users):
    """
    HTTPX client talking to the app in-process.

    raise_app_exceptions=False lets the catch-all 500 handler's response
    reach the test instead of re-raising.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def super_admin_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {SUPER_ADMIN_TOKEN}"}


@pytest.fixture
def user_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {USER_TOKEN}"}


# ══════════════════════════════════════════════════════════════════════════
# Unit-test helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    AsyncMock standing in for AsyncSession.

    Usage:
        mock_db_session.get.return_value = category
        await category_service.get_category(mock_db_session, category_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def product_payload():
    """A product body that passes every field constraint."""
    return {
        "title": "Cold Brew Coffee",
        "description": "Slow-steeped for eighteen hours.",
        "discountPercentage": 10,
        "brand": "Morning Co",
        "rating": 4.5,
        "category": "Beverages",
        "thumbnail": "https://cdn.example.com/cold-brew/thumb.jpg",
        "productBG": "https://cdn.example.com/cold-brew/bg.png",
        "images": ["https://cdn.example.com/cold-brew/1.jpg"],
        "variants": [
            {"size": "250ml", "price": 100, "stock": 12},
            {"size": "1L", "price": 300, "stock": 4},
        ],
        "packaging": ["Bottle"],
        "accordion": {
            "details": "Arabica beans.",
            "shipping": "Ships in 2 days.",
            "returns": "30-day returns.",
        },
    }
