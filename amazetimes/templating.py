"""Jinja2 environment shared by the HTML routers."""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi.encoders import jsonable_encoder
from fastapi.templating import Jinja2Templates

from amazetimes.config import get_settings
from amazetimes.models import ArticleCategory
from amazetimes.services.i18n import Language

TEMPLATE_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

_DAYS_TA = ["திங்கள்", "செவ்வாய்", "புதன்", "வியாழன்", "வெள்ளி", "சனி", "ஞாயிறு"]
_MONTHS_TA = [
    "ஜனவரி", "பிப்ரவரி", "மார்ச்", "ஏப்ரல்", "மே", "ஜூன்",
    "ஜூலை", "ஆகஸ்ட்", "செப்டம்பர்", "அக்டோபர்", "நவம்பர்", "டிசம்பர்",
]


def format_published(value: Optional[datetime], language: Language = Language.EN) -> str:
    """Format a publish time like 'Friday, October 16, 2026 • 3:04 PM'."""
    if value is None:
        return ""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    clock = f"{hour}:{value.minute:02d} {meridiem}"
    if language == Language.TA:
        day = _DAYS_TA[value.weekday()]
        month = _MONTHS_TA[value.month - 1]
        return f"{day}, {month} {value.day}, {value.year} • {clock}"
    return f"{value:%A, %B} {value.day}, {value.year} • {clock}"


def category_label(value: Optional[str], language: Language = Language.EN) -> str:
    category = ArticleCategory.coerce(value)
    return category.label_ta if language == Language.TA else category.label_en


def excerpt(text: Optional[str], length: int = 160) -> str:
    if not text:
        return ""
    text = " ".join(text.split())
    return text if len(text) <= length else text[:length].rstrip() + "…"


templates.env.filters["published"] = format_published
templates.env.filters["category_label"] = category_label
templates.env.filters["excerpt"] = excerpt
templates.env.globals["settings"] = get_settings()
templates.env.globals["categories"] = list(ArticleCategory)


def article_url(article: dict) -> str:
    """Public path of an article; articles without a party live under 'general'."""
    party = article.get("party")
    party_slug = party["slug"] if party else "general"
    return f"/party/{party_slug}/{article['slug']}"


templates.env.globals["article_url"] = article_url


def _dumps(obj, **kwargs) -> str:
    return json.dumps(jsonable_encoder(obj), **kwargs)


# tojson must cope with the datetimes in repository results
templates.env.policies["json.dumps_function"] = _dumps
