"""Async engine and session helpers."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from core import settings

logger = logging.getLogger(__name__)

async_engine: AsyncEngine = create_async_engine(settings.database_url, pool_pre_ping=True)
async_session_maker = async_sessionmaker(async_engine, expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with async_session_maker() as session:
        yield session


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create missing tables for every registered model."""
    # Registers table metadata.
    import models  # noqa: F401

    engine = engine or async_engine
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables ensured")
