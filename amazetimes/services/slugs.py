"""URL slug generation for news articles."""

import re
import time
from typing import Optional

MAX_SLUG_PREFIX = 100

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")


def slugify(title: str) -> str:
    """Return the URL-safe form of an English title, without the suffix.

    >>> slugify("DMK Launches New Policy!")
    'dmk-launches-new-policy'
    """
    slug = _DISALLOWED.sub("", title.lower())
    slug = _WHITESPACE.sub("-", slug)
    return slug[:MAX_SLUG_PREFIX]


def generate_slug(title_en: str, now_ms: Optional[int] = None) -> str:
    """Derive an article slug from its English title.

    The creation time in epoch milliseconds is appended to keep slugs
    unique; no lookup against existing slugs is made.
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{slugify(title_en)}-{now_ms}"
