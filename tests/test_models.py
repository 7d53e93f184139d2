"""Tests for model helpers, reference-data seeding and template filters."""

from datetime import datetime

import pytest
from sqlalchemy import select

from amazetimes.database import seed_parties
from amazetimes.models import ArticleCategory, Party
from amazetimes.models.party import DEFAULT_PARTIES
from amazetimes.services.i18n import Language
from amazetimes.templating import article_url, category_label, excerpt, format_published
from tests.conftest import make_article


class TestCategories:
    """Tests for the bilingual category set."""

    def test_every_category_has_both_labels(self):
        for category in ArticleCategory:
            assert category.label_en
            assert category.label_ta

    def test_unknown_value_coerces_to_general(self):
        assert ArticleCategory.coerce("sports") == ArticleCategory.GENERAL
        assert ArticleCategory.coerce(None) == ArticleCategory.GENERAL
        assert ArticleCategory.coerce("protests") == ArticleCategory.PROTESTS

    def test_article_category_info(self):
        article = make_article("a1", category="elections")
        assert article.category_info.label_ta == "தேர்தல்கள்"
        assert article.is_published is True
        assert make_article("d1", status="draft").is_published is False


class TestSeedParties:
    """Tests for default party seeding."""

    @pytest.mark.asyncio
    async def test_seeds_empty_table_once(self, db_session):
        inserted = await seed_parties(db_session)
        again = await seed_parties(db_session)

        result = await db_session.execute(select(Party.slug))
        slugs = set(result.scalars().all())
        assert inserted == len(DEFAULT_PARTIES)
        assert again == 0
        assert {"dmk", "aiadmk", "bjp"} <= slugs
        assert len(slugs) == len(DEFAULT_PARTIES)

    @pytest.mark.asyncio
    async def test_existing_parties_are_left_alone(self, db_session, sample_parties):
        assert await seed_parties(db_session) == 0


class TestTemplateFilters:
    """Tests for Jinja filters and globals."""

    def test_format_published_english(self):
        value = datetime(2026, 10, 16, 15, 4)
        assert format_published(value) == "Friday, October 16, 2026 • 3:04 PM"

    def test_format_published_tamil(self):
        value = datetime(2026, 10, 16, 0, 30)
        assert format_published(value, Language.TA) == "வெள்ளி, அக்டோபர் 16, 2026 • 12:30 AM"

    def test_format_published_missing(self):
        assert format_published(None) == ""

    def test_category_label(self):
        assert category_label("government") == "Government"
        assert category_label("government", Language.TA) == "அரசு"
        assert category_label("unknown") == "General"

    def test_excerpt(self):
        assert excerpt("short  text\nhere") == "short text here"
        assert excerpt("word " * 100, length=10) == "word word…"
        assert excerpt(None) == ""

    def test_article_url(self):
        assert article_url({"slug": "s", "party": {"slug": "dmk"}}) == "/party/dmk/s"
        assert article_url({"slug": "s", "party": None}) == "/party/general/s"
