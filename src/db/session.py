"""Database connection management.

History is optional: without DATABASE_URL (or POSTGRES_HOST) the service
still answers questions, it just can't store or list them.

There is no module-level "connected" flag. Callers hold a Database and call
ensure_ready() before every operation; it connects on first use, is a no-op
afterwards, and reconnects after invalidate().
"""

import asyncio
import os
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.db.models import Base
from src.errors import PersistenceError
from src.utils.logging import log, get_logger

MODULE = "db"
logger = get_logger()


def _database_url_from_env() -> str:
    url = os.getenv("DATABASE_URL", "")
    if url:
        return url

    host = os.getenv("POSTGRES_HOST", "")
    if not host:
        return ""
    port = os.getenv("POSTGRES_PORT", "5432")
    db = os.getenv("POSTGRES_DB", "fundraising_qa")
    user = os.getenv("POSTGRES_USER", "fundraising_qa")
    password = os.getenv("POSTGRES_PASSWORD", "fundraising-qa-dev")
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db}"


DATABASE_URL = _database_url_from_env()


class Database:
    """Lazily connected async engine with an idempotent readiness check."""

    def __init__(self, url: Optional[str] = DATABASE_URL, **engine_kwargs):
        self.url = url or ""
        self._engine_kwargs = {"echo": False, "pool_pre_ping": True, **engine_kwargs}
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.url)

    @property
    def ready(self) -> bool:
        return self._sessionmaker is not None

    async def ensure_ready(self) -> async_sessionmaker[AsyncSession]:
        """Connect and create tables if needed, then return the session factory.

        Raises:
            PersistenceError: not configured, or the database is unreachable
        """
        if self._sessionmaker is not None:
            return self._sessionmaker

        async with self._lock:
            if self._sessionmaker is not None:
                return self._sessionmaker

            if not self.configured:
                raise PersistenceError("DATABASE_URL not set, history is disabled")

            log.info(logger, MODULE, "connect_start", "Connecting to database")
            engine: Optional[AsyncEngine] = None
            try:
                # Bad URLs, unknown dialects and missing drivers fail here
                engine = create_async_engine(self.url, **self._engine_kwargs)
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
            except (SQLAlchemyError, ImportError, OSError, asyncio.TimeoutError) as e:
                if engine is not None:
                    await engine.dispose()
                log.error(logger, MODULE, "connect_failed", "Database connection failed",
                          error=str(e), error_type=type(e).__name__)
                raise PersistenceError(f"Database unavailable: {e}") from e

            self._engine = engine
            self._sessionmaker = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False,
            )
            log.info(logger, MODULE, "connect_done", "Database ready")
            return self._sessionmaker

    async def invalidate(self) -> None:
        """Drop the current engine so the next ensure_ready() reconnects."""
        async with self._lock:
            engine, self._engine, self._sessionmaker = self._engine, None, None
        if engine is not None:
            await engine.dispose()
            log.warning(logger, MODULE, "invalidated", "Database connection reset")

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
