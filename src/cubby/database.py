"""Database — async SQLite engine, pragmas, and table bootstrap."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from cubby.exceptions import CubbyError
from cubby.models import Share, User

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class Database:
    """Owns the engine and session factory for the user and share tables.

    ``path`` is a SQLite file path, or ``":memory:"`` for a private
    in-process database (tests).
    """

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._init_lock = asyncio.Lock()

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """The async session factory, available after ``open()``."""
        if self._session_factory is None:
            raise CubbyError("Database is not open")
        return self._session_factory

    async def open(self) -> None:
        """Create the engine and any missing tables."""
        if self._session_factory is not None:
            return
        async with self._init_lock:
            if self._session_factory is not None:
                return

            if self.path == MEMORY:
                engine = create_async_engine(
                    "sqlite+aiosqlite://",
                    echo=False,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                )
            else:
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
                engine = create_async_engine(
                    f"sqlite+aiosqlite:///{self.path}",
                    echo=False,
                )

            @event.listens_for(engine.sync_engine, "connect")
            def _set_sqlite_pragma(dbapi_connection: object, connection_record: object) -> None:
                cursor = dbapi_connection.cursor()  # type: ignore[union-attr]
                cursor.execute("PRAGMA journal_mode=WAL")
                result = cursor.fetchone()
                if result[0].lower() not in ("wal", "memory"):
                    logger.warning("WAL mode not active, got: %s", result[0])
                cursor.execute("PRAGMA busy_timeout=5000")
                cursor.execute("PRAGMA synchronous=FULL")
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

            async with engine.begin() as conn:
                user_table = User.__table__  # type: ignore[attr-defined]
                share_table = Share.__table__  # type: ignore[attr-defined]
                await conn.run_sync(lambda c: user_table.create(c, checkfirst=True))
                await conn.run_sync(lambda c: share_table.create(c, checkfirst=True))

            self._engine = engine
            self._session_factory = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            logger.debug("Opened database at %s", self.path)

    async def close(self) -> None:
        """Dispose of the engine and release connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
