"""Database connection and session management.

The engine is created lazily on first use and memoized for the lifetime of
the process. While the first connection attempt is in flight, every other
caller awaits that same attempt instead of opening a second engine. A
failed attempt is forgotten so the next caller retries.
"""

import asyncio
import time
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings
from app.core.logging_config import get_logger
from app.db.base import Base

logger = get_logger(__name__)


class DatabaseConnection:
    """Lazily connected, memoized async engine plus its session factory."""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None
        self._pending: Optional["asyncio.Future[AsyncEngine]"] = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> AsyncEngine:
        """Return the connected engine, opening it on first call.

        Raises:
            Exception: Whatever the underlying driver raised; the cached
                attempt is cleared first so a later call can retry.
        """
        if self._engine is not None:
            return self._engine

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._open())
            self._pending.add_done_callback(self._forget_failed)

        pending = self._pending
        try:
            # shield: a cancelled caller must not cancel the shared attempt
            engine = await asyncio.shield(pending)
        except Exception:
            if self._pending is pending:
                self._pending = None
            raise

        self._engine = engine
        return engine

    def _forget_failed(self, future: "asyncio.Future[AsyncEngine]") -> None:
        # Runs even when every waiter was cancelled before the attempt ended
        if future.cancelled() or future.exception() is not None:
            if self._pending is future:
                self._pending = None

    async def _open(self) -> AsyncEngine:
        start_time = time.time()
        connect_args = {"check_same_thread": False} if self.database_url.startswith("sqlite") else {}
        engine = create_async_engine(
            self.database_url,
            echo=self.echo,
            connect_args=connect_args,
        )

        try:
            async with engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                await conn.run_sync(Base.metadata.create_all)
        except Exception as exc:
            await engine.dispose()
            logger.error(
                "database_connection_failed",
                database=engine.url.render_as_string(hide_password=True),
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        self._sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(
            "database_connected",
            database=engine.url.render_as_string(hide_password=True),
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        return engine

    async def session(self) -> AsyncSession:
        """Open a new session on the memoized engine."""
        await self.connect()
        return self._sessionmaker()

    async def ping(self) -> bool:
        """Check that the database answers a trivial query."""
        engine = await self.connect()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        """Release the engine; the next connect() opens a fresh one."""
        engine, self._engine = self._engine, None
        self._pending = None
        self._sessionmaker = None
        if engine is not None:
            await engine.dispose()
            logger.info("database_disconnected")


database = DatabaseConnection(settings.DATABASE_URL, echo=settings.is_debug_mode)


async def connect_db() -> AsyncEngine:
    """Connect the process-wide database (idempotent)."""
    return await database.connect()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database session."""
    session = await database.session()
    async with session:
        yield session
