"""News article database model."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from amazetimes.database import Base


class ArticleCategory(str, Enum):
    """Fixed set of article categories with their bilingual labels."""

    ELECTIONS = "elections"
    GOVERNMENT = "government"
    STATEMENTS = "statements"
    PROTESTS = "protests"
    GENERAL = "general"

    @property
    def label_en(self) -> str:
        return _CATEGORY_LABELS[self][0]

    @property
    def label_ta(self) -> str:
        return _CATEGORY_LABELS[self][1]

    @classmethod
    def coerce(cls, value: Optional[str]) -> "ArticleCategory":
        """Map a stored value to a category; unknown values display as general."""
        try:
            return cls(value)
        except ValueError:
            return cls.GENERAL


_CATEGORY_LABELS = {
    ArticleCategory.ELECTIONS: ("Elections", "தேர்தல்கள்"),
    ArticleCategory.GOVERNMENT: ("Government", "அரசு"),
    ArticleCategory.STATEMENTS: ("Statements", "அறிக்கைகள்"),
    ArticleCategory.PROTESTS: ("Protests", "போராட்டங்கள்"),
    ArticleCategory.GENERAL: ("General", "பொது"),
}


class ArticleStatus(str, Enum):
    """Visibility status; only published articles reach the public pages."""

    PUBLISHED = "published"
    DRAFT = "draft"


class ArticleSource(str, Enum):
    """How the article entered the system."""

    MANUAL = "manual"
    AUTO = "auto"


class NewsArticle(Base):
    """Bilingual news article."""

    __tablename__ = "news"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    slug: Mapped[str] = mapped_column(String(120), unique=True, index=True)

    title_en: Mapped[str] = mapped_column(String(500))
    title_ta: Mapped[str] = mapped_column(String(500))
    content_en: Mapped[str] = mapped_column(Text)
    content_ta: Mapped[str] = mapped_column(Text)

    category: Mapped[str] = mapped_column(
        String(20), default=ArticleCategory.GENERAL.value, index=True
    )
    party_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("parties.id", ondelete="SET NULL"), nullable=True, index=True
    )

    is_breaking: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[str] = mapped_column(
        String(20), default=ArticleStatus.PUBLISHED.value, index=True
    )

    source: Mapped[str] = mapped_column(String(20), default=ArticleSource.MANUAL.value)
    source_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    featured_image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True, index=True
    )

    # Relationships
    party: Mapped[Optional["Party"]] = relationship(back_populates="articles", lazy="selectin")

    @property
    def is_published(self) -> bool:
        return self.status == ArticleStatus.PUBLISHED.value

    @property
    def category_info(self) -> ArticleCategory:
        return ArticleCategory.coerce(self.category)


from amazetimes.models.party import Party
