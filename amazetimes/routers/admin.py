"""Admin console: login entry point, dashboard and article CRUD API."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from amazetimes.config import get_settings
from amazetimes.database import get_db
from amazetimes.dependencies import (
    get_access_token,
    get_optional_session,
    get_query_cache,
    require_session,
)
from amazetimes.schemas import ArticlePayload
from amazetimes.services.article_editor import ArticleEditor, ErrorKind, SubmitResult
from amazetimes.services.auth_api import AuthServiceError, AuthSession, auth_client
from amazetimes.services.content_repository import RepositoryError, content_repository
from amazetimes.services.i18n import LanguageContext
from amazetimes.services.query_cache import QueryCache, QueryKey, QueryName
from amazetimes.templating import templates

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/admin", tags=["admin"])

_STATUS_FOR_ERROR = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STORAGE: 500,
}


async def _admin_news(db: AsyncSession, cache: QueryCache) -> list[dict]:
    return await cache.fetch(
        QueryKey.of(QueryName.ADMIN_NEWS),
        lambda: content_repository.list_all_articles(db),
    )


async def _admin_parties(db: AsyncSession, cache: QueryCache) -> list[dict]:
    return await cache.fetch(
        QueryKey.of(QueryName.ADMIN_PARTIES),
        lambda: content_repository.list_parties(db),
    )


async def _result_response(
    result: SubmitResult, db: AsyncSession, cache: QueryCache, status_code: int = 200
) -> JSONResponse:
    """Turn an editor outcome into JSON, refetching the admin listing on success."""
    if not result.ok:
        return JSONResponse(
            content={"error": result.error, "kind": result.kind.value},
            status_code=_STATUS_FOR_ERROR[result.kind],
        )

    try:
        articles = await _admin_news(db, cache)
    except RepositoryError as exc:
        logger.warning("Could not refetch admin listing: %s", exc.message)
        articles = None
    return JSONResponse(
        content=jsonable_encoder({
            "article": result.article,
            "articles": articles,
            "invalidated": sorted(name.value for name in result.invalidated),
        }),
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse)
async def login(
    request: Request,
    session: Optional[AuthSession] = Depends(get_optional_session),
):
    """Login entry point; signed-in admins go straight to the dashboard."""
    if session is not None:
        return RedirectResponse(url="/admin/dashboard", status_code=303)
    return templates.TemplateResponse(
        request, "admin/login.html", {"lang": LanguageContext(), "login_url": settings.auth_login_url}
    )


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    session: AuthSession = Depends(require_session),
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    try:
        articles = await _admin_news(db, cache)
        parties = await _admin_parties(db, cache)
    except RepositoryError as exc:
        return templates.TemplateResponse(
            request,
            "error.html",
            {"lang": LanguageContext(), "message": exc.message, "breaking": [], "parties": []},
            status_code=500,
        )
    return templates.TemplateResponse(
        request,
        "admin/dashboard.html",
        {"lang": LanguageContext(), "session": session, "articles": articles, "parties": parties},
    )


@router.post("/logout")
async def logout(access_token: Optional[str] = Depends(get_access_token)):
    try:
        await auth_client.sign_out(access_token)
    except AuthServiceError as exc:
        return JSONResponse(content={"error": str(exc)}, status_code=503)
    response = RedirectResponse(url="/admin", status_code=303)
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get("/api/articles")
async def list_articles(
    session: AuthSession = Depends(require_session),
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> JSONResponse:
    try:
        articles = await _admin_news(db, cache)
    except RepositoryError as exc:
        return JSONResponse(content={"error": exc.message}, status_code=500)
    return JSONResponse(content=jsonable_encoder({"count": len(articles), "articles": articles}))


@router.get("/api/parties")
async def list_parties(
    session: AuthSession = Depends(require_session),
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> JSONResponse:
    try:
        parties = await _admin_parties(db, cache)
    except RepositoryError as exc:
        return JSONResponse(content={"error": exc.message}, status_code=500)
    return JSONResponse(content=jsonable_encoder({"count": len(parties), "parties": parties}))


@router.post("/api/articles")
async def create_article(
    payload: ArticlePayload,
    idempotency_key: Optional[str] = Header(default=None),
    session: AuthSession = Depends(require_session),
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> JSONResponse:
    editor = ArticleEditor(query_cache=cache)
    editor.start_create()
    editor.update(**payload.form_fields())
    result = await editor.submit(db, token=idempotency_key or payload.submission_token)
    return await _result_response(result, db, cache, status_code=201)


@router.put("/api/articles/{article_id}")
async def update_article(
    article_id: str,
    payload: ArticlePayload,
    idempotency_key: Optional[str] = Header(default=None),
    session: AuthSession = Depends(require_session),
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> JSONResponse:
    try:
        existing = await content_repository.get_article(db, article_id)
    except RepositoryError as exc:
        return JSONResponse(content={"error": exc.message}, status_code=500)
    if existing is None:
        return JSONResponse(content={"error": "Article not found"}, status_code=404)

    editor = ArticleEditor(query_cache=cache)
    editor.load(existing)
    editor.update(**payload.form_fields())
    result = await editor.submit(db, token=idempotency_key or payload.submission_token)
    return await _result_response(result, db, cache)


@router.delete("/api/articles/{article_id}")
async def delete_article(
    article_id: str,
    session: AuthSession = Depends(require_session),
    db: AsyncSession = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
) -> JSONResponse:
    editor = ArticleEditor(query_cache=cache)
    result = await editor.delete(db, article_id)
    return await _result_response(result, db, cache)
