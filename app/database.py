"""
Database configuration and session management.

This provides:
1. Async SQLAlchemy engine for SQLite (aiosqlite) or PostgreSQL (asyncpg)
2. Foreign key enforcement on SQLite connections
3. Session factory
4. Table creation on startup
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import DateTime, event, func
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.config import settings

logger = logging.getLogger("database")


class Base(DeclarativeBase):
    """
    Base model class for all database models.

    Provides created/updated timestamps. Primary keys are declared per model
    because users use opaque string ids while friendships are sequential.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        """String representation for debugging"""
        return f"<{self.__class__.__name__}(id={getattr(self, 'id', None)})>"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores FOREIGN KEY clauses unless this pragma is set per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, **engine_kwargs: Any) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    Pool sizing only applies to server databases; SQLite connections get
    foreign key enforcement instead.
    """
    is_sqlite = database_url.startswith("sqlite")

    kwargs: dict = {"echo": settings.debug}
    if not is_sqlite:
        kwargs.update(
            {
                "pool_size": settings.database_pool_size,
                "max_overflow": settings.database_max_overflow,
                "pool_pre_ping": True,  # Validate connections before use
                "pool_recycle": 3600,
            }
        )
    kwargs.update(engine_kwargs)

    engine = create_async_engine(database_url, **kwargs)

    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    return engine


engine = build_engine(settings.database_url)

# Create session factory
AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite") or not url.database:
        return
    if url.database == ":memory:":
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


async def init_db(target: Optional[AsyncEngine] = None):
    """Initialize database - create all tables"""
    target = target or engine
    _ensure_sqlite_directory(str(target.url))

    async with target.begin() as conn:
        # Import all models here to ensure they're registered
        from app.models import friendship, user  # noqa

        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"Database tables ready at {target.url.render_as_string()}")
