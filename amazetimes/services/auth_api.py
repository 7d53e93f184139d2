"""Client for the hosted authentication service.

Only session lookup and sign-out are used here; the login flow itself
lives on the hosted service (see ``AUTH_LOGIN_URL``).
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from amazetimes.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthListener = Callable[[str, Optional["AuthSession"]], None]


class AuthServiceError(Exception):
    """The auth service could not be reached or answered unexpectedly."""


@dataclass(frozen=True)
class AuthSession:
    """An authenticated admin session."""

    access_token: str
    user_id: str
    email: Optional[str] = None


class AuthAPIClient:
    """Client for the hosted auth REST API."""

    def __init__(self):
        self.base_url = settings.auth_api_url
        self.api_key = settings.auth_api_key
        self._listeners: list[AuthListener] = []
        # Last known session per access token
        self._sessions: dict[str, AuthSession] = {}

    def _get_headers(self, access_token: str) -> dict:
        return {"apikey": self.api_key, "Authorization": f"Bearer {access_token}"}

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a callback for session changes.

        Returns:
            A function that removes the callback again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, session: Optional[AuthSession]) -> None:
        for listener in list(self._listeners):
            listener(event, session)

    async def get_session(self, access_token: Optional[str]) -> Optional[AuthSession]:
        """Resolve an access token to a session.

        Returns:
            The session, or None when the token is missing, invalid or expired.

        Raises:
            AuthServiceError: If the service is unreachable or fails.
        """
        if not access_token or not self.base_url:
            return None

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.base_url}/user",
                    headers=self._get_headers(access_token),
                    timeout=30.0,
                )
                if response.status_code in (401, 403):
                    self._forget(access_token)
                    return None
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            logger.error("Auth session lookup failed: %s", exc)
            raise AuthServiceError(str(exc)) from exc

        session = AuthSession(
            access_token=access_token,
            user_id=data.get("id", ""),
            email=data.get("email"),
        )
        if self._sessions.get(access_token) != session:
            self._sessions[access_token] = session
            self._notify(SIGNED_IN, session)
        return session

    def _forget(self, access_token: str) -> None:
        """Drop a token whose session ended, notifying if it was known."""
        if self._sessions.pop(access_token, None) is not None:
            self._notify(SIGNED_OUT, None)

    async def sign_out(self, access_token: Optional[str]) -> None:
        """End the session on the auth service.

        Raises:
            AuthServiceError: If the service is unreachable or fails.
        """
        if access_token and self.base_url:
            try:
                async with httpx.AsyncClient() as client:
                    response = await client.post(
                        f"{self.base_url}/logout",
                        headers=self._get_headers(access_token),
                        timeout=30.0,
                    )
                    # An already-expired token is as good as signed out
                    if response.status_code not in (401, 403):
                        response.raise_for_status()
            except httpx.HTTPError as exc:
                logger.error("Auth sign-out failed: %s", exc)
                raise AuthServiceError(str(exc)) from exc

        if access_token:
            self._sessions.pop(access_token, None)
        self._notify(SIGNED_OUT, None)


auth_client = AuthAPIClient()
