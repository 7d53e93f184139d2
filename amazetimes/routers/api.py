"""JSON API over the public content queries."""

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from amazetimes.database import get_db
from amazetimes.services.content_repository import RepositoryError, content_repository

router = APIRouter(prefix="/api", tags=["api"])


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)


@router.get("/news/latest")
async def latest_news(
    limit: int = Query(default=20, ge=1, le=50, description="Max results"),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    try:
        news = await content_repository.list_latest_published(db, limit)
    except RepositoryError as exc:
        return _error(exc.message, 500)
    return JSONResponse(content=jsonable_encoder({"count": len(news), "news": news}))


@router.get("/news/breaking")
async def breaking_news(
    limit: int = Query(default=5, ge=1, le=20, description="Max results"),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    try:
        news = await content_repository.list_breaking(db, limit)
    except RepositoryError as exc:
        return _error(exc.message, 500)
    return JSONResponse(content=jsonable_encoder({"count": len(news), "news": news}))


@router.get("/news/{slug}")
async def news_article(slug: str, db: AsyncSession = Depends(get_db)) -> JSONResponse:
    try:
        article = await content_repository.get_by_slug(db, slug)
    except RepositoryError as exc:
        return _error(exc.message, 500)
    if article is None:
        return _error("Article not found", 404)
    return JSONResponse(content=jsonable_encoder(article))


@router.get("/news/{slug}/related")
async def related_news(
    slug: str,
    limit: int = Query(default=4, ge=1, le=20, description="Max results"),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Published news from the article's party; empty when it has no party."""
    try:
        article = await content_repository.get_by_slug(db, slug)
        if article is None:
            return _error("Article not found", 404)
        related = []
        if article["party_id"]:
            related = await content_repository.list_related(
                db, article["party_id"], article["id"], limit
            )
    except RepositoryError as exc:
        return _error(exc.message, 500)
    return JSONResponse(content=jsonable_encoder({"count": len(related), "news": related}))


@router.get("/parties")
async def parties(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    try:
        rows = await content_repository.list_parties(db)
    except RepositoryError as exc:
        return _error(exc.message, 500)
    return JSONResponse(content=jsonable_encoder({"count": len(rows), "parties": rows}))


@router.get("/parties/{slug}")
async def party(slug: str, db: AsyncSession = Depends(get_db)) -> JSONResponse:
    try:
        row = await content_repository.get_party_by_slug(db, slug)
    except RepositoryError as exc:
        return _error(exc.message, 500)
    if row is None:
        return _error("Party not found", 404)
    return JSONResponse(content=jsonable_encoder(row))


@router.get("/parties/{slug}/news")
async def party_news(
    slug: str,
    limit: int = Query(default=30, ge=1, le=100, description="Max results"),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    try:
        row = await content_repository.get_party_by_slug(db, slug)
        if row is None:
            return _error("Party not found", 404)
        news = await content_repository.list_by_party(db, row["id"], limit)
    except RepositoryError as exc:
        return _error(exc.message, 500)
    return JSONResponse(content=jsonable_encoder({
        "party": row,
        "count": len(news),
        "news": news,
    }))
