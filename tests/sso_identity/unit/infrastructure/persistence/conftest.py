"""
Pytest fixtures for identity persistence tests.

Each test gets a fresh schema. SQLAlchemy tests run against in-memory
SQLite by default; set TEST_DATABASE_URL (e.g. a postgresql+asyncpg URL)
to run them against a real server.
"""

import os

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from sso_identity.infrastructure.persistence.memory import InMemoryIdentityRepository
from sso_identity.infrastructure.persistence.sqlalchemy import (
    IdentityBase,
    IdentityRepositorySQLAlchemy,
)

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "")


@pytest_asyncio.fixture
async def async_engine():
    """
    Create an async engine with a fresh identity schema.

    In-memory SQLite needs a StaticPool so every session shares the one
    connection that holds the database.
    """
    if TEST_DATABASE_URL:
        engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
    else:
        engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            echo=False,
            poolclass=StaticPool,
        )

    async with engine.begin() as conn:
        await conn.run_sync(IdentityBase.metadata.drop_all)
        await conn.run_sync(IdentityBase.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(IdentityBase.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(async_engine):
    """Provide an isolated session for one test."""
    session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def sqlalchemy_repo(async_session) -> IdentityRepositorySQLAlchemy:
    return IdentityRepositorySQLAlchemy(async_session)


@pytest.fixture(params=["memory", "sqlalchemy"])
def identity_repo(request):
    """Every repository implementation, for behavior shared by all of them."""
    if request.param == "memory":
        return InMemoryIdentityRepository()
    return request.getfixturevalue("sqlalchemy_repo")


@pytest_asyncio.fixture
async def shared_engine(tmp_path):
    """
    Engine whose sessions each get their own connection.

    Concurrency tests need separate connections, which an in-memory
    SQLite database cannot offer, so they use a file in ``tmp_path``.
    """
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'identity.db'}"
    engine = create_async_engine(url, echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(IdentityBase.metadata.drop_all)
        await conn.run_sync(IdentityBase.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(IdentityBase.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(shared_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(shared_engine, class_=AsyncSession, expire_on_commit=False)
