"""
Shared test fixtures and configuration.
"""

import asyncio
import itertools
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.cache import CacheManager
from app.core.history import CommandLog
from app.database import build_engine, init_db
from app.services.graph_service import GraphService
from app.services.graph_store import GraphStore


@pytest_asyncio.fixture
async def test_engine():
    """In-memory SQLite engine with tables and foreign keys enabled."""
    engine = build_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )
    await init_db(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """Create test database session with in-memory SQLite."""
    SessionLocal = async_sessionmaker(test_engine, expire_on_commit=False)

    async with SessionLocal() as session:
        yield session


@pytest.fixture
def id_factory():
    """Deterministic user ids: mock-uuid-1, mock-uuid-2, ..."""
    counter = itertools.count(1)
    return lambda: f"mock-uuid-{next(counter)}"


@pytest.fixture
def write_lock():
    return asyncio.Lock()


@pytest.fixture
def store(db_session, id_factory, write_lock):
    """GraphStore over the test database."""
    return GraphStore(db_session, id_factory=id_factory, write_lock=write_lock)


@pytest.fixture
def mock_redis():
    """Mock Redis client."""
    redis_mock = AsyncMock()
    redis_mock.ping = AsyncMock(return_value=True)
    redis_mock.get = AsyncMock(return_value=None)
    redis_mock.set = AsyncMock(return_value=True)
    redis_mock.setex = AsyncMock(return_value=True)
    redis_mock.delete = AsyncMock(return_value=1)
    redis_mock.keys = AsyncMock(return_value=[])
    redis_mock.publish = AsyncMock(return_value=0)
    return redis_mock


@pytest.fixture
def mock_cache_manager(mock_redis):
    """Mock cache manager for testing."""
    cache = CacheManager(redis_url="")
    cache.redis_client = mock_redis
    return cache


@pytest.fixture
def offline_cache():
    """Cache manager with no Redis connection."""
    return CacheManager(redis_url="")


@pytest.fixture
def service(db_session, id_factory, write_lock, offline_cache):
    """GraphService with a private history and no cache."""
    return GraphService(
        db_session,
        history=CommandLog(),
        cache=offline_cache,
        id_factory=id_factory,
        write_lock=write_lock,
    )


@pytest.fixture
def cached_service(db_session, id_factory, write_lock, mock_cache_manager):
    """GraphService backed by a mocked Redis cache."""
    return GraphService(
        db_session,
        history=CommandLog(),
        cache=mock_cache_manager,
        id_factory=id_factory,
        write_lock=write_lock,
    )
