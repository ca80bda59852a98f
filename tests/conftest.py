"""
Shared test fixtures for the Mesa Auth test suite.

Async throughout (aiosqlite + AsyncSession); each test gets a fresh
in-memory database and its own identity store file.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import get_db
from app.core.security import get_password_hash
from app.core.slug import slugify
from app.db.base import Base
from app.main import app
from app.models.active_session import ActiveSession  # noqa: F401
from app.models.user import User
from app.services.auth import AuthManager
from app.services.storage import IdentityStore
from app.services.timer import AutoLogoutTimer


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh in-memory database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def identity_store(tmp_path) -> IdentityStore:
    return IdentityStore(tmp_path / "identity.json", "current_user")


@pytest.fixture
def timer() -> AutoLogoutTimer:
    return AutoLogoutTimer(600)


@pytest.fixture
def auth_manager(session_factory, identity_store, timer):
    manager = AuthManager(session_factory, identity_store, timer)
    yield manager
    manager.shutdown()


@pytest.fixture
def create_account(session_factory):
    """Insert an account directly. ``hashed=False`` stores a legacy plaintext password."""

    async def _create(
        username: str,
        *,
        password: str | None = None,
        hashed: bool = True,
        is_admin: bool = False,
        is_employee: bool = False,
        slug: str | None = None,
        phone: str = "11999990000",
    ) -> User:
        if password is not None and hashed:
            stored = get_password_hash(password)
        else:
            stored = password
        async with session_factory() as db:
            user = User(
                username=username,
                phone=phone,
                password_hash=stored,
                slug=slug or slugify(username),
                is_admin=is_admin,
                is_employee=is_employee,
            )
            db.add(user)
            await db.commit()
            return user

    return _create


@pytest.fixture
async def async_client(session_factory, auth_manager) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app and the test database."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.state.auth_manager = auth_manager

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
