"""
Cat Registry API — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite + StaticPool,
       so all sessions share the one connection), created from Base.metadata.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── engine:           in-memory database with the schema created
    ├── session_factory:  async_sessionmaker bound to that engine
    ├── db:               one session for service/store-level tests
    ├── alice, bob:       regular users (password "alice-pass" / "bob-pass")
    ├── admin:            admin user (password "admin-pass")
    ├── *_caller:         CallerIdentity for each seeded user
    ├── auth_headers:     factory: user → {"Authorization": "Bearer ..."}
    ├── sample_image_bytes
    └── test_client:      HTTPX AsyncClient with get_db_session overridden
"""

import os
import tempfile

# Settings are read at import time, so the environment is prepared before
# anything from catapi is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="catapi_test_")
os.environ["JWT_SECRET"] = "test-secret-for-the-suite-only-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator, Callable, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from catapi.authorization import CallerIdentity
from catapi.database import Base, get_db_session
from catapi.models import User
from catapi.security import create_access_token, hash_password
from catapi.stores import UserStore


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
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
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    A session for tests that call services or stores directly.

    Usage:
        async def test_get_cat(db, cat):
            result = await cat_service.get_cat(db, cat.id)
    """
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Seed Data
# ══════════════════════════════════════════════════════════════════════════

async def _seed_user(session_factory, user_name: str, email: str, password: str, role: str) -> User:
    async with session_factory() as session:
        user = await UserStore(session).create(
            {
                "user_name": user_name,
                "email": email,
                "password": hash_password(password),
                "role": role,
            }
        )
        await session.commit()
        return user


@pytest_asyncio.fixture
async def alice(session_factory) -> User:
    return await _seed_user(session_factory, "alice", "alice@example.com", "alice-pass", "user")


@pytest_asyncio.fixture
async def bob(session_factory) -> User:
    return await _seed_user(session_factory, "bob", "bob@example.com", "bob-pass", "user")


@pytest_asyncio.fixture
async def admin(session_factory) -> User:
    return await _seed_user(session_factory, "root", "admin@example.com", "admin-pass", "admin")


def _caller(user: User) -> CallerIdentity:
    return CallerIdentity(id=user.id, user_name=user.user_name, email=user.email, role=user.role)


@pytest.fixture
def alice_caller(alice) -> CallerIdentity:
    return _caller(alice)


@pytest.fixture
def bob_caller(bob) -> CallerIdentity:
    return _caller(bob)


@pytest.fixture
def admin_caller(admin) -> CallerIdentity:
    return _caller(admin)


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """Factory producing a valid bearer header for a seeded user."""
    def make(user: User) -> Dict[str, str]:
        token = create_access_token(
            sub=str(user.id),
            user_name=user.user_name,
            email=user.email,
            role=user.role,
        )
        return {"Authorization": f"Bearer {token}"}
    return make


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Smallest JPEG-looking payload: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app through ASGITransport, with every
    request's session drawn from the test database.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from catapi.main import app

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
