"""Pytest configuration and shared fixtures for API tests."""

import os
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Set test DB before app imports so config/engine use it
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test-blog.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from app.core.auth import hash_password
from app.db.session import init_db
from app.main import create_app
from app.models.category import Category
from app.models.user import User

TEST_EMAIL = "test@test.com"
TEST_PASSWORD = "password123"


class FakeClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    """Fresh SQLite file per test; every session opens its own connection so concurrent tasks behave."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'blog.db'}", poolclass=NullPool)
    await init_db(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def app(session_maker, clock):
    return create_app(session_maker=session_maker, clock=clock)


@pytest.fixture
def services(app):
    return app.state.services


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


async def create_user(session_maker, email: str = TEST_EMAIL, password: str = TEST_PASSWORD) -> User:
    async with session_maker() as session:
        user = User(email=email, password_hash=hash_password(password))
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest.fixture
def make_user(session_maker):
    """Factory: await make_user(email, password) -> committed User."""

    async def _make(email: str = TEST_EMAIL, password: str = TEST_PASSWORD) -> User:
        return await create_user(session_maker, email, password)

    return _make


@pytest_asyncio.fixture
async def test_user(session_maker, services):
    """Create a user via DB (committed) and return (user_id, email, access_token)."""
    user = await create_user(session_maker)
    token = services.token_issuer.issue(user.id).token
    return user.id, user.email, token


@pytest.fixture
def auth_headers(test_user):
    """Return dict of Authorization header for test_user."""
    _, __, token = test_user
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def category(session_maker):
    async with session_maker() as session:
        c = Category(name="Engineering")
        session.add(c)
        await session.commit()
        await session.refresh(c)
        return c
