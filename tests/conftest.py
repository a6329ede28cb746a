"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: isolate the cached pagination settings
    - Data Source Fixtures: in-memory fake for the pagination core
    - Database Fixtures: in-memory SQLite engine, session and seeded users
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cursor_connection.core.settings import get_pagination_settings
from tests.models import USERS, Base, Post, User
from tests.utils import PEOPLE, FakeDataSource

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch: pytest.MonkeyPatch):
    """Reload pagination settings from a clean environment for every test."""
    monkeypatch.delenv("CURSOR_PAGINATION_MAX_LIMIT", raising=False)
    monkeypatch.delenv("CURSOR_PAGINATION_JOIN_ASSOCIATIONS", raising=False)
    get_pagination_settings.cache_clear()
    yield
    get_pagination_settings.cache_clear()


# ============================================================================
# Data Source Fixtures
# ============================================================================


@pytest.fixture
def people_source() -> FakeDataSource:
    """In-memory data source over the six sample people (PK ``id``)."""
    return FakeDataSource(PEOPLE)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create async SQLAlchemy engine with in-memory SQLite.

    StaticPool keeps the single in-memory database alive across sessions.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Async session seeded with the six sample users and two posts each."""
    async with session_factory() as session:
        session.add_all(User(compositeUnique1="A", **values) for values in USERS)
        await session.flush()
        session.add_all(
            Post(id=user["id"] * 10 + n, title=f"post {n} by {user['id']}", author_id=user["id"])
            for user in USERS
            for n in (1, 2)
        )
        await session.commit()

        try:
            yield session
        finally:
            await session.rollback()
