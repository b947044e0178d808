"""Async database handle for SQLAlchemy 2.0+.

`Database` owns one engine and its session maker. It is constructed
explicitly (in the application lifespan or a test fixture) and passed to the
code that needs it, so there is no module-level engine holding credentials.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from astrochat.app.core.config import Settings, settings as default_settings
from astrochat.app.core.logging import get_logger
from astrochat.app.db.base import Base

logger = get_logger(__name__)


def create_engine_for(database_url: str, config: Settings | None = None) -> AsyncEngine:
    """Create an async engine with pool settings suited to the backend.

    PostgreSQL (asyncpg) gets a sized QueuePool and a per-command timeout.
    SQLite keeps SQLAlchemy's defaults, except in-memory databases which
    share a single connection so every session sees the same data.
    """
    config = config or default_settings

    if "sqlite" in database_url.lower():
        kwargs = {}
        if ":memory:" in database_url or "mode=memory" in database_url:
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        engine = create_async_engine(database_url, echo=False, **kwargs)
        logger.info("Created SQLite async engine")
        return engine

    # Reference: https://magicstack.github.io/asyncpg/current/api/index.html
    connect_args = {"command_timeout": config.db_command_timeout}
    engine = create_async_engine(
        database_url,
        echo=False,
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_timeout=config.db_pool_timeout,
        pool_recycle=config.db_pool_recycle,
        pool_pre_ping=config.db_pool_pre_ping,
        connect_args=connect_args,
    )
    logger.info(
        f"Created PostgreSQL async engine (pool_size={config.db_pool_size}, "
        f"max_overflow={config.db_max_overflow}, "
        f"pool_timeout={config.db_pool_timeout}s)"
    )
    return engine


class Database:
    """Engine plus session maker with an explicit lifecycle.

    Usage:
        database = Database("sqlite+aiosqlite:///:memory:")
        await database.create_all()
        async with database.session() as session:
            ...
        await database.dispose()
    """

    def __init__(self, database_url: str | None = None, config: Settings | None = None):
        config = config or default_settings
        self.url = database_url or config.database_url
        self.engine = create_engine_for(self.url, config)
        self._session_maker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session that commits on success and rolls back on error."""
        async with self._session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create all tables that do not exist yet."""
        from astrochat.app.db import models  # noqa: F401 - import to register models

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Run `SELECT 1`; errors propagate to the caller."""
        async with self.engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            return result.scalar() == 1

    async def verify_connection(self) -> bool:
        """Check the database is reachable, logging the failure if not."""
        try:
            return await self.ping()
        except Exception as e:
            logger.error(f"Database connection failed: {type(e).__name__}")
            return False

    async def dispose(self) -> None:
        """Release pooled connections. Call on application shutdown."""
        try:
            await self.engine.dispose()
            logger.debug("Async engine disposed successfully")
        except RuntimeError:
            # Event loop mismatch in test scenarios; the connections are gone.
            logger.debug("Engine dispose encountered RuntimeError (event loop mismatch)")
