"""Database models."""

from amazetimes.models.party import Party
from amazetimes.models.news import (
    ArticleCategory,
    ArticleSource,
    ArticleStatus,
    NewsArticle,
)

__all__ = [
    "Party",
    "NewsArticle",
    "ArticleCategory",
    "ArticleSource",
    "ArticleStatus",
]
