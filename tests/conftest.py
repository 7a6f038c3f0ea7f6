"""
Pytest fixtures for blog core tests.
"""

import os
import tempfile
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from blogcore.database import close_db, create_engine, create_session_factory, init_db
from blogcore.kernel.identity.password import PasswordHasher
from blogcore.kernel.stores import PostStore, SessionStore, UserStore

# bcrypt minimum; keeps the suite fast
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def db_path():
    """Temp-file SQLite path (in-memory SQLite is per-connection)."""
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    yield tmp.name
    for suffix in ("", "-wal", "-shm"):
        try:
            os.unlink(tmp.name + suffix)
        except FileNotFoundError:
            pass


@pytest_asyncio.fixture
async def bare_engine(db_path: str) -> AsyncGenerator[AsyncEngine, None]:
    """Engine on an empty database with no tables."""
    engine = create_engine(f"sqlite+aiosqlite:///{db_path}")
    yield engine
    await close_db(engine)


@pytest_asyncio.fixture
async def db_engine(bare_engine: AsyncEngine) -> AsyncEngine:
    """Engine with all tables created."""
    await init_db(bare_engine)
    return bare_engine


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def post_store(session_factory) -> PostStore:
    return PostStore(session_factory)


@pytest.fixture
def user_store(session_factory, hasher: PasswordHasher) -> UserStore:
    return UserStore(session_factory, hasher)


@pytest.fixture
def session_store(session_factory) -> SessionStore:
    return SessionStore(session_factory)


@pytest.fixture
def broken_factory(bare_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory whose queries fail: the tables were never created."""
    return create_session_factory(bare_engine)
