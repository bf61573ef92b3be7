"""Database utilities for the Streamly catalog store."""

from __future__ import annotations

import logging

from sqlalchemy import MetaData, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)

# Bumped only on breaking changes to the items table layout.
SCHEMA_VERSION = 1


class Base(DeclarativeBase):
    """Declarative base with consistent naming conventions."""

    metadata = MetaData()


class Database:
    """Thin wrapper managing the SQLAlchemy async engine and sessions."""

    def __init__(self, database_url: str):
        self._engine: AsyncEngine = create_async_engine(database_url, future=True)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self._engine, expire_on_commit=False
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def create_all(self) -> None:
        """Create database tables if they do not yet exist."""

        from . import db_models  # noqa: F401 - registers tables on Base.metadata

        async with self._engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
            await connection.run_sync(self._record_schema_version)

    @staticmethod
    def _record_schema_version(sync_connection) -> None:
        """Stamp a fresh schema with its version; existing stamps are left alone."""

        stored = sync_connection.execute(
            text("SELECT version FROM schema_info WHERE id = 1")
        ).scalar_one_or_none()
        if stored is None:
            sync_connection.execute(
                text("INSERT INTO schema_info (id, version) VALUES (1, :version)"),
                {"version": SCHEMA_VERSION},
            )
            return
        if stored != SCHEMA_VERSION:
            logger.warning(
                "Catalog schema version %s does not match expected version %s",
                stored,
                SCHEMA_VERSION,
            )

    async def schema_version(self) -> int | None:
        """Return the stamped schema version, if any."""

        async with self._engine.connect() as connection:
            result = await connection.execute(
                text("SELECT version FROM schema_info WHERE id = 1")
            )
            return result.scalar_one_or_none()

    async def dispose(self) -> None:
        """Dispose of the underlying database engine."""

        await self._engine.dispose()
