"""Read/write access to news articles and parties.

Every call is a single round trip to the datastore. Nothing is cached here
and nothing is retried: storage failures are logged and re-raised as
``RepositoryError`` for the caller to decide on a fallback.
"""

import functools
import logging
from datetime import datetime
from typing import Any, Mapping, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from amazetimes.models import ArticleSource, ArticleStatus, NewsArticle, Party
from amazetimes.services.slugs import generate_slug

logger = logging.getLogger(__name__)

# Columns the admin console may write; slug and source are fixed at creation
EDITABLE_FIELDS = (
    "title_en",
    "title_ta",
    "content_en",
    "content_ta",
    "category",
    "party_id",
    "featured_image",
    "is_breaking",
    "is_featured",
    "status",
)

# Optional references where an empty form value means "none"
_NULLABLE_FIELDS = ("party_id", "featured_image")


class RepositoryError(Exception):
    """A datastore call failed."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ArticleNotFoundError(RepositoryError):
    """An update targeted an article id that does not exist."""

    def __init__(self, article_id: str):
        super().__init__(f"News article {article_id} not found")
        self.article_id = article_id


def _storage_errors(method):
    """Roll back, log and re-raise SQLAlchemy failures as RepositoryError."""

    @functools.wraps(method)
    async def wrapper(self, db: AsyncSession, *args, **kwargs):
        try:
            return await method(self, db, *args, **kwargs)
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("%s failed: %s", method.__name__, exc)
            raise RepositoryError(str(exc)) from exc

    return wrapper


class ContentRepository:
    """Query and mutation façade over the news and parties tables."""

    @_storage_errors
    async def list_latest_published(self, db: AsyncSession, limit: int = 20) -> list[dict]:
        """Get the newest published articles, newest first."""
        result = await db.execute(self._published().limit(limit))
        return [self._article_to_dict(a) for a in result.scalars().all()]

    @_storage_errors
    async def list_breaking(self, db: AsyncSession, limit: int = 5) -> list[dict]:
        """Get the newest published breaking articles for the ticker."""
        result = await db.execute(
            self._published().where(NewsArticle.is_breaking.is_(True)).limit(limit)
        )
        return [self._article_to_dict(a) for a in result.scalars().all()]

    @_storage_errors
    async def get_by_slug(self, db: AsyncSession, slug: str) -> Optional[dict]:
        """Get a published article by slug, or None when there is none."""
        result = await db.execute(self._published().where(NewsArticle.slug == slug))
        article = result.scalar_one_or_none()
        return self._article_to_dict(article) if article else None

    @_storage_errors
    async def list_by_party(
        self, db: AsyncSession, party_id: str, limit: int = 30
    ) -> list[dict]:
        """Get a party's published articles, newest first."""
        result = await db.execute(
            self._published().where(NewsArticle.party_id == party_id).limit(limit)
        )
        return [self._article_to_dict(a) for a in result.scalars().all()]

    @_storage_errors
    async def list_related(
        self, db: AsyncSession, party_id: str, exclude_id: str, limit: int = 4
    ) -> list[dict]:
        """Get published articles of the same party, excluding one article."""
        result = await db.execute(
            self._published()
            .where(NewsArticle.party_id == party_id)
            .where(NewsArticle.id != exclude_id)
            .limit(limit)
        )
        return [self._article_to_dict(a) for a in result.scalars().all()]

    @_storage_errors
    async def list_parties(self, db: AsyncSession) -> list[dict]:
        """Get all parties ordered by English name."""
        result = await db.execute(select(Party).order_by(Party.name_en))
        return [self._party_to_dict(p) for p in result.scalars().all()]

    @_storage_errors
    async def get_party_by_slug(self, db: AsyncSession, slug: str) -> Optional[dict]:
        result = await db.execute(select(Party).where(Party.slug == slug))
        party = result.scalar_one_or_none()
        return self._party_to_dict(party) if party else None

    @_storage_errors
    async def list_all_articles(self, db: AsyncSession) -> list[dict]:
        """Get every article regardless of status, newest created first (admin)."""
        result = await db.execute(
            select(NewsArticle).order_by(NewsArticle.created_at.desc(), NewsArticle.id.desc())
        )
        return [self._article_to_dict(a) for a in result.scalars().all()]

    @_storage_errors
    async def get_article(self, db: AsyncSession, article_id: str) -> Optional[dict]:
        """Get an article by id regardless of status (admin)."""
        article = await self._load(db, article_id)
        return self._article_to_dict(article) if article else None

    @_storage_errors
    async def create_article(
        self,
        db: AsyncSession,
        fields: Mapping[str, Any],
        source: ArticleSource = ArticleSource.MANUAL,
        source_url: Optional[str] = None,
    ) -> dict:
        """Insert a new article with a freshly generated slug."""
        values = self._editable_values(fields)
        article = NewsArticle(
            slug=generate_slug(values["title_en"]),
            source=ArticleSource(source).value,
            source_url=source_url if source == ArticleSource.AUTO else None,
            **values,
        )
        self._stamp_published(article)
        db.add(article)
        await db.commit()
        logger.info("Created news article %s (%s)", article.id, article.slug)

        created = await self._load(db, article.id)
        return self._article_to_dict(created)

    @_storage_errors
    async def update_article(
        self, db: AsyncSession, article_id: str, fields: Mapping[str, Any]
    ) -> dict:
        """Apply a partial update to an article's editable fields.

        Raises:
            ArticleNotFoundError: If no article has ``article_id``.
        """
        article = await self._load(db, article_id)
        if article is None:
            raise ArticleNotFoundError(article_id)

        for name, value in self._editable_values(fields).items():
            setattr(article, name, value)
        self._stamp_published(article)
        await db.commit()
        logger.info("Updated news article %s", article_id)

        updated = await self._load(db, article_id)
        return self._article_to_dict(updated)

    @_storage_errors
    async def delete_article(self, db: AsyncSession, article_id: str) -> bool:
        """Hard-delete an article.

        Returns:
            True if a row was removed, False if the id did not exist.
        """
        result = await db.execute(delete(NewsArticle).where(NewsArticle.id == article_id))
        await db.commit()
        removed = result.rowcount > 0
        logger.info("Deleted news article %s (removed=%s)", article_id, removed)
        return removed

    def _published(self):
        """Published articles in feed order."""
        return (
            select(NewsArticle)
            .where(NewsArticle.status == ArticleStatus.PUBLISHED.value)
            .order_by(
                NewsArticle.published_at.desc(),
                NewsArticle.created_at.desc(),
                NewsArticle.id.desc(),
            )
        )

    async def _load(self, db: AsyncSession, article_id: str) -> Optional[NewsArticle]:
        result = await db.execute(
            select(NewsArticle)
            .where(NewsArticle.id == article_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def _editable_values(self, fields: Mapping[str, Any]) -> dict:
        values = {name: fields[name] for name in EDITABLE_FIELDS if name in fields}
        for name in _NULLABLE_FIELDS:
            if name in values and not values[name]:
                values[name] = None
        for name in ("category", "status"):
            if name in values and hasattr(values[name], "value"):
                values[name] = values[name].value
        return values

    def _stamp_published(self, article: NewsArticle) -> None:
        status = article.status or ArticleStatus.PUBLISHED.value
        if status == ArticleStatus.PUBLISHED.value and article.published_at is None:
            article.published_at = datetime.utcnow()

    def _article_to_dict(self, article: NewsArticle) -> dict:
        """Convert NewsArticle model to dict with its party summary embedded."""
        return {
            "id": article.id,
            "slug": article.slug,
            "title_en": article.title_en,
            "title_ta": article.title_ta,
            "content_en": article.content_en,
            "content_ta": article.content_ta,
            "category": article.category,
            "party_id": article.party_id,
            "featured_image": article.featured_image,
            "is_breaking": bool(article.is_breaking),
            "is_featured": bool(article.is_featured),
            "status": article.status,
            "source": article.source,
            "source_url": article.source_url,
            "created_at": article.created_at,
            "updated_at": article.updated_at,
            "published_at": article.published_at,
            "party": article.party.summary() if article.party else None,
        }

    def _party_to_dict(self, party: Party) -> dict:
        """Convert Party model to dict."""
        return {
            **party.summary(),
            "description_en": party.description_en,
            "description_ta": party.description_ta,
            "logo_url": party.logo_url,
            "founded_year": party.founded_year,
            "created_at": party.created_at,
            "updated_at": party.updated_at,
        }


content_repository = ContentRepository()
