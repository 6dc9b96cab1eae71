"""Root conftest - shared test configuration and database fixtures.

Invariants:
    - DSN / JWT_SECRET set before any user_service module reads settings
    - Every test gets a fresh in-memory SQLite database
"""

import os

os.environ.setdefault("DSN", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from user_service.db.base import Base  # noqa: E402
from user_service.infrastructure.security import PasswordHasher, TokenIssuer  # noqa: E402
from user_service.models.user import User  # noqa: E402


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
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
def hasher():
    return PasswordHasher()


@pytest.fixture
def tokens():
    return TokenIssuer(os.environ["JWT_SECRET"])


@pytest.fixture
def seed_users(test_session_factory):
    """Insert users directly (placeholder hashes, no bcrypt cost).

    Call as `await seed_users(n)` or `await seed_users(rows=[(name, email), ...])`.
    """

    async def _seed(count: int = 0, rows: list[tuple[str, str]] | None = None):
        rows = rows or [
            (f"User {i:02d}", f"user{i:02d}@example.com")
            for i in range(1, count + 1)
        ]
        async with test_session_factory() as session:
            users = [
                User(name=name, email=email, password="not-a-real-hash")
                for name, email in rows
            ]
            session.add_all(users)
            await session.commit()
            return [u.id for u in users]

    return _seed
