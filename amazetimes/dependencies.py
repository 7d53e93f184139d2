"""Shared FastAPI dependencies."""

from typing import Optional

from fastapi import Depends, HTTPException, Request

from amazetimes.config import get_settings
from amazetimes.services.auth_api import AuthServiceError, AuthSession, auth_client
from amazetimes.services.i18n import CookieStorage, LanguageContext, LanguagePreferenceStore
from amazetimes.services.query_cache import QueryCache

settings = get_settings()

LOGIN_PATH = "/admin"


def get_language_store(request: Request) -> LanguagePreferenceStore:
    """Preference store initialised from the request's language cookie."""
    return LanguagePreferenceStore(
        CookieStorage(request.cookies), key=settings.language_cookie_name
    )


def get_language(
    store: LanguagePreferenceStore = Depends(get_language_store),
) -> LanguageContext:
    return store.context()


def get_query_cache() -> QueryCache:
    """A fresh deduplicating cache per request."""
    return QueryCache()


def get_access_token(request: Request) -> Optional[str]:
    """Access token from the session cookie or a bearer Authorization header."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


async def get_optional_session(
    access_token: Optional[str] = Depends(get_access_token),
) -> Optional[AuthSession]:
    try:
        return await auth_client.get_session(access_token)
    except AuthServiceError as exc:
        raise HTTPException(status_code=503, detail=f"Authentication unavailable: {exc}")


async def require_session(
    session: Optional[AuthSession] = Depends(get_optional_session),
) -> AuthSession:
    """Admin guard: without a session, redirect to the login entry point."""
    if session is None:
        raise HTTPException(status_code=303, headers={"Location": LOGIN_PATH})
    return session
