"""Public reader pages: home feed, party feed, article detail."""

import logging
from typing import Any, Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from amazetimes.config import get_settings
from amazetimes.database import get_db
from amazetimes.dependencies import get_language, get_query_cache
from amazetimes.models import ArticleCategory
from amazetimes.services.content_repository import RepositoryError, content_repository
from amazetimes.services.i18n import CookieStorage, Language, LanguageContext, LanguagePreferenceStore
from amazetimes.services.query_cache import QueryCache, QueryKey, QueryName
from amazetimes.templating import templates

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(tags=["news"])

LATEST_LIMIT = 20
FEATURED_LIMIT = 3
BREAKING_LIMIT = 5
PARTY_NEWS_LIMIT = 30
RELATED_LIMIT = 4


async def load_list(
    cache: QueryCache, key: QueryKey, loader: Callable[[], Awaitable[list]]
) -> list:
    """Fetch a list for display; a storage failure renders as an empty list."""
    try:
        return await cache.fetch(key, loader)
    except RepositoryError as exc:
        logger.warning("Could not load %s: %s", key, exc.message)
        return []


async def page_context(
    request: Request, db: AsyncSession, cache: QueryCache, lang: LanguageContext, **extra: Any
) -> dict:
    """Context shared by every public page (ticker and party navigation)."""
    breaking = await load_list(
        cache,
        QueryKey.of(QueryName.BREAKING_NEWS, BREAKING_LIMIT),
        lambda: content_repository.list_breaking(db, BREAKING_LIMIT),
    )
    parties = await load_list(
        cache,
        QueryKey.of(QueryName.PARTIES),
        lambda: content_repository.list_parties(db),
    )
    return {"lang": lang, "breaking": breaking, "parties": parties, "path": request.url.path, **extra}


def render_error(request: Request, context: dict, message: str) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "error.html", {**context, "message": message}, status_code=500
    )


def render_not_found(request: Request, context: dict, kind: str) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "not_found.html", {**context, "kind": kind}, status_code=404
    )


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    lang: LanguageContext = Depends(get_language),
):
    """Home feed: up to three featured stories above the latest news."""
    news = await load_list(
        cache,
        QueryKey.of(QueryName.NEWS_LATEST, LATEST_LIMIT),
        lambda: content_repository.list_latest_published(db, LATEST_LIMIT),
    )
    featured = [n for n in news if n["is_featured"]][:FEATURED_LIMIT]
    latest = [n for n in news if not n["is_featured"]]

    context = await page_context(request, db, cache, lang, featured=featured, latest=latest)
    return templates.TemplateResponse(request, "index.html", context)


@router.get("/party/{slug}", response_class=HTMLResponse)
async def party_page(
    request: Request,
    slug: str,
    category: Optional[str] = Query(default=None, description="Category tab"),
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    lang: LanguageContext = Depends(get_language),
):
    """A party's profile and its news, optionally narrowed to one category."""
    context = await page_context(request, db, cache, lang)
    try:
        party = await cache.fetch(
            QueryKey.of(QueryName.PARTY, slug),
            lambda: content_repository.get_party_by_slug(db, slug),
        )
    except RepositoryError as exc:
        return render_error(request, context, exc.message)
    if party is None:
        return render_not_found(request, context, "party")

    news = await load_list(
        cache,
        QueryKey.of(QueryName.PARTY_NEWS, party["id"]),
        lambda: content_repository.list_by_party(db, party["id"], PARTY_NEWS_LIMIT),
    )
    selected = category if category in {c.value for c in ArticleCategory} else "all"
    if selected != "all":
        news = [n for n in news if n["category"] == selected]

    context.update(party=party, news=news, selected_category=selected)
    return templates.TemplateResponse(request, "party.html", context)


@router.get("/party/{party_slug}/{article_slug}", response_class=HTMLResponse)
async def article_page(
    request: Request,
    party_slug: str,
    article_slug: str,
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    lang: LanguageContext = Depends(get_language),
):
    """Article detail with related news from the same party."""
    context = await page_context(request, db, cache, lang)
    try:
        article = await cache.fetch(
            QueryKey.of(QueryName.ARTICLE, article_slug),
            lambda: content_repository.get_by_slug(db, article_slug),
        )
    except RepositoryError as exc:
        return render_error(request, context, exc.message)
    if article is None:
        return render_not_found(request, context, "article")

    # Related news needs the resolved party, so it waits for the article
    related = []
    party = article["party"]
    if party:
        related = await load_list(
            cache,
            QueryKey.of(QueryName.RELATED_NEWS, party["id"], article["id"]),
            lambda: content_repository.list_related(db, party["id"], article["id"], RELATED_LIMIT),
        )

    context.update(article=article, related=related)
    return templates.TemplateResponse(request, "article.html", context)


def _safe_next(next_path: Optional[str]) -> str:
    if next_path and next_path.startswith("/") and not next_path.startswith("//"):
        return next_path
    return "/"


@router.post("/language/{code}")
async def set_language(
    request: Request,
    code: str,
    next: Optional[str] = Query(default=None, description="Page to return to"),
):
    """Switch the display language and remember it in a cookie.

    Unknown codes are ignored; the page buttons only offer en and ta.
    """
    response = RedirectResponse(url=_safe_next(next), status_code=303)
    if Language.parse(code) is None:
        return response

    store = LanguagePreferenceStore(
        CookieStorage(request.cookies, response), key=settings.language_cookie_name
    )
    store.set_language(code)
    return response
