"""
Database connection and session management.

Responsibilities:
- Create one async engine (bounded connection pool) per process.
- Create tables and indexes on open; dispose the pool on close.
- Provide sessions to the repositories.

One Database instance is created at startup (FastAPI lifespan or CLI),
opened once, injected into every repository, and closed on shutdown.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from wallet_indexer.config import Settings
from wallet_indexer.database.tables import Base
from wallet_indexer.indexer_logging import get_logger

logger = get_logger(__name__)


def _safe_url(url: str) -> str:
    """Render a database URL without its password for logs."""
    try:
        return make_url(url).render_as_string(hide_password=True)
    except Exception:
        return "<unparseable database url>"


class Database:
    """Process-wide storage handle: async engine + session factory."""

    def __init__(
        self,
        url: str,
        *,
        pool_min_size: int = 1,
        pool_max_size: int = 10,
        pool_timeout_sec: float = 30.0,
        echo: bool = False,
    ) -> None:
        if not url.strip():
            raise ValueError("database url must be non-empty")
        if pool_max_size < pool_min_size:
            raise ValueError("pool_max_size must be >= pool_min_size")
        self._url = url.strip()
        self._pool_min_size = pool_min_size
        self._pool_max_size = pool_max_size
        self._pool_timeout_sec = pool_timeout_sec
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_min_size=settings.db_pool_min_size,
            pool_max_size=max(settings.db_pool_max_size, settings.db_pool_min_size),
            pool_timeout_sec=settings.db_pool_timeout_sec,
        )

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def _engine_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"echo": self._echo}
        if self._url.startswith("sqlite"):
            # SQLite picks its own pool class; size bounds only apply to server databases.
            return kwargs
        kwargs.update(
            pool_size=self._pool_min_size,
            max_overflow=self._pool_max_size - self._pool_min_size,
            pool_timeout=self._pool_timeout_sec,
            pool_pre_ping=True,
        )
        return kwargs

    async def open(self) -> None:
        """Create the engine and ensure schema. Idempotent."""
        if self._engine is not None:
            return
        logger.info(
            "database_connecting",
            url=_safe_url(self._url),
            pool_min_size=self._pool_min_size,
            pool_max_size=self._pool_max_size,
        )
        engine = create_async_engine(self._url, **self._engine_kwargs())
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self._engine = engine
        self._sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
        logger.info("database_connected", url=_safe_url(self._url))

    async def close(self) -> None:
        """Dispose the connection pool. Safe to call when not open."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("database_closed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session inside a transaction; commit on success, rollback on error."""
        if self._sessionmaker is None:
            raise RuntimeError("Database not opened")
        async with self._sessionmaker() as session:
            async with session.begin():
                yield session
