"""
Database connection and session management.

One Database per application: the container builds it from DatabaseSettings
the first time a database-backed store is needed.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)

from tenantflags.core.config import DatabaseSettings
from tenantflags.core.features.backends.database import storage_errors


class Database:
    """Async engine plus the session factory bound to it."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "Database":
        engine = create_async_engine(
            str(settings.url),
            echo=settings.echo,
            pool_size=settings.pool_size,
            max_overflow=settings.pool_overflow,
            pool_timeout=settings.pool_timeout,
        )
        return cls(engine)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Unit of work: committed on clean exit, rolled back on error.

        A failing commit surfaces as StorageError like any other store fault.
        """
        async with self.session_factory() as session:
            try:
                yield session
                with storage_errors("commit"):
                    await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Create missing tables (development; production uses Alembic)."""
        from .base import Base
        from tenantflags.core.features import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close database connections."""
        await self.engine.dispose()
