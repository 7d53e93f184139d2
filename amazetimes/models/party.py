"""Political party database model."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from amazetimes.database import Base


class Party(Base):
    """Political party with bilingual name and description.

    Parties are read-only from the application's point of view; rows come
    from the datastore's seed data.
    """

    __tablename__ = "parties"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True)

    name_en: Mapped[str] = mapped_column(String(200))
    name_ta: Mapped[str] = mapped_column(String(200))
    description_en: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_ta: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    logo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    founded_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    articles: Mapped[list["NewsArticle"]] = relationship(
        back_populates="party", lazy="noload", passive_deletes=True
    )

    def summary(self) -> dict:
        """Return the fields embedded in article results."""
        return {
            "id": self.id,
            "slug": self.slug,
            "name_en": self.name_en,
            "name_ta": self.name_ta,
            "color": self.color,
        }


# Seed rows for the parties linked from the site navigation
DEFAULT_PARTIES = [
    {
        "slug": "dmk",
        "name_en": "DMK",
        "name_ta": "திமுக",
        "description_en": "Dravida Munnetra Kazhagam",
        "description_ta": "திராவிட முன்னேற்றக் கழகம்",
        "color": "#E31E24",
        "founded_year": 1949,
    },
    {
        "slug": "aiadmk",
        "name_en": "AIADMK",
        "name_ta": "அதிமுக",
        "description_en": "All India Anna Dravida Munnetra Kazhagam",
        "description_ta": "அனைத்திந்திய அண்ணா திராவிட முன்னேற்றக் கழகம்",
        "color": "#008000",
        "founded_year": 1972,
    },
    {
        "slug": "bjp",
        "name_en": "BJP Tamil Nadu",
        "name_ta": "பாஜக தமிழ்நாடு",
        "description_en": "Bharatiya Janata Party, Tamil Nadu unit",
        "description_ta": "பாரதிய ஜனதா கட்சி, தமிழ்நாடு பிரிவு",
        "color": "#FF9933",
        "founded_year": 1980,
    },
    {
        "slug": "ntk",
        "name_en": "Naam Tamilar Katchi",
        "name_ta": "நாம் தமிழர் கட்சி",
        "color": "#C8102E",
        "founded_year": 2010,
    },
    {
        "slug": "pmk",
        "name_en": "PMK",
        "name_ta": "பாமக",
        "description_en": "Pattali Makkal Katchi",
        "description_ta": "பாட்டாளி மக்கள் கட்சி",
        "color": "#FFC20E",
        "founded_year": 1989,
    },
    {
        "slug": "congress",
        "name_en": "Congress TN",
        "name_ta": "காங்கிரஸ் தமிழ்நாடு",
        "description_en": "Indian National Congress, Tamil Nadu unit",
        "description_ta": "இந்திய தேசிய காங்கிரஸ், தமிழ்நாடு பிரிவு",
        "color": "#19AAED",
        "founded_year": 1885,
    },
]


# Import at bottom to avoid circular imports
from amazetimes.models.news import NewsArticle
