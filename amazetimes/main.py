"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from amazetimes import __version__
from amazetimes.config import get_settings
from amazetimes.database import init_db
from amazetimes.routers import admin, api, news

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    await init_db()
    logger.info("AmazeTimes Now %s started", __version__)
    yield


app = FastAPI(
    title="AmazeTimes Now",
    description="Bilingual (English/Tamil) Tamil Nadu political news",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(api.router)
app.include_router(admin.router)
app.include_router(news.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
