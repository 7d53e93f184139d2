"""Shared fixtures: an in-memory database per test and sample content."""

from datetime import datetime, timedelta

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from amazetimes.database import Base
from amazetimes.models import NewsArticle, Party


# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BASE_TIME = datetime(2020, 1, 1, 9, 0, 0)


@pytest_asyncio.fixture
async def engine():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def sample_parties(db_session: AsyncSession):
    """Create two parties for testing."""
    parties = [
        Party(id="party-dmk", slug="dmk", name_en="DMK", name_ta="திமுக", color="#E31E24"),
        Party(id="party-aiadmk", slug="aiadmk", name_en="AIADMK", name_ta="அதிமுக", color="#008000"),
    ]
    db_session.add_all(parties)
    await db_session.commit()
    return parties


def make_article(
    article_id: str,
    minutes: int = 0,
    status: str = "published",
    party_id=None,
    **overrides,
) -> NewsArticle:
    """Build an article published ``minutes`` after BASE_TIME."""
    values = {
        "id": article_id,
        "slug": f"{article_id}-slug",
        "title_en": f"Title {article_id}",
        "title_ta": f"தலைப்பு {article_id}",
        "content_en": f"Content {article_id}",
        "content_ta": f"உள்ளடக்கம் {article_id}",
        "category": "general",
        "party_id": party_id,
        "status": status,
        "published_at": BASE_TIME + timedelta(minutes=minutes) if status == "published" else None,
    }
    values.update(overrides)
    return NewsArticle(**values)
