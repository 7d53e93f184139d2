"""Async database engine, session provider and initialisation."""

import logging
from typing import AsyncIterator

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from amazetimes.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

engine = create_async_engine(settings.database_url, echo=False)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base for all models."""


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield a database session (use as a FastAPI dependency)."""
    async with async_session() as session:
        yield session


async def init_db() -> None:
    """Create tables and seed reference data. Safe to call on startup."""
    from amazetimes import models  # noqa: F401  registers tables on Base

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError:
        logger.exception("Failed to initialise database %s", settings.database_url)
        raise
    logger.info("Database initialised: %s", settings.database_url)

    if settings.seed_parties:
        async with async_session() as session:
            await seed_parties(session)


async def seed_parties(db: AsyncSession) -> int:
    """Insert the default parties if the parties table is empty.

    Returns:
        Number of parties inserted.
    """
    from amazetimes.models import Party
    from amazetimes.models.party import DEFAULT_PARTIES

    count = await db.scalar(select(func.count()).select_from(Party))
    if count:
        return 0

    db.add_all(Party(**data) for data in DEFAULT_PARTIES)
    await db.commit()
    logger.info("Seeded %d parties", len(DEFAULT_PARTIES))
    return len(DEFAULT_PARTIES)
