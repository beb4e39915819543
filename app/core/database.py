"""Database engine, sessions and the storage handle shared by repositories."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all models."""


class Storage:
    """Explicitly constructed storage handle.

    Owns the engine and session factory for the lifetime of the process.
    Repositories receive it at construction time instead of reaching for a
    module-level connection.
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.database_url = database_url
        engine_kwargs: dict = {"echo": echo}
        if ":memory:" in database_url:
            # A single shared connection keeps the in-memory database alive
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        self.engine: AsyncEngine = create_async_engine(database_url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session that commits on success and rolls back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create tables for every registered model."""
        # Import models so they register with Base.metadata
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Release all pooled connections."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


async def get_storage(request: Request) -> Storage:
    """Dependency that provides the storage handle opened in the app lifespan."""
    return request.app.state.storage
