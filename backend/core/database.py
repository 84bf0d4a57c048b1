"""
Async engine and session lifecycle for the gating store.

Sessions commit on clean exit and roll back on error. Readiness batches rely on
SAVEPOINTs (``session.begin_nested()``) so one integration's failed write never
discards the others; on SQLite that needs the driver's implicit BEGIN replaced
by an explicit one, see ``_enable_sqlite_savepoints``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

logger = logging.getLogger(__name__)


def _is_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite")


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Foreign keys on, and BEGIN emitted by SQLAlchemy so SAVEPOINT nests inside it."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:  # pragma: no cover
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn) -> None:  # pragma: no cover
        conn.exec_driver_sql("BEGIN")


class DatabaseManager:
    """Owns one engine and its session factory."""

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        self.engine: Optional[AsyncEngine] = None
        self._factory: Optional[async_sessionmaker[AsyncSession]] = None

    async def init(self) -> None:
        if self.engine is not None:
            return
        self.engine = create_async_engine(self.database_url, echo=False)
        if _is_sqlite(self.database_url):
            _enable_sqlite_savepoints(self.engine)
        self._factory = async_sessionmaker(self.engine, expire_on_commit=False)
        logger.info("Database engine ready (%s)", self.engine.url.render_as_string(hide_password=True))

    async def create_all(self) -> None:
        """Create every gating and readiness table that does not exist yet."""
        if self.engine is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")
        import models  # noqa: F401  registers tables
        from models.base import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        logger.info("Database engine disposed")
        self.engine = None
        self._factory = None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """One unit of work: commit on success, roll back and re-raise on error."""
        if self._factory is None:
            raise RuntimeError("DatabaseManager is not initialized. Call init() first.")
        async with self._factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


_db_manager: Optional[DatabaseManager] = None


async def init_database(database_url: str, *, create_tables: bool = False) -> DatabaseManager:
    """Initialize the process-wide manager; create_tables is for dev runs and tests."""
    global _db_manager

    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)
    await _db_manager.init()
    if create_tables:
        await _db_manager.create_all()
    return _db_manager


async def dispose_database() -> None:
    global _db_manager

    if _db_manager is not None:
        await _db_manager.dispose()
        _db_manager = None


def get_database_manager() -> DatabaseManager:
    if _db_manager is None:
        raise RuntimeError("DatabaseManager is not initialized.")
    return _db_manager
