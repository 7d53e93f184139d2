"""Unit tests for the hosted auth service client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from amazetimes.services.auth_api import (
    SIGNED_IN,
    SIGNED_OUT,
    AuthAPIClient,
    AuthServiceError,
    AuthSession,
)


def make_client() -> AuthAPIClient:
    client = AuthAPIClient()
    client.base_url = "https://auth.example.test/auth/v1"
    client.api_key = "anon-key"
    return client


def patch_http(method: str, response=None, error=None):
    """Patch httpx.AsyncClient so ``method`` returns ``response`` or raises ``error``."""
    patcher = patch("amazetimes.services.auth_api.httpx.AsyncClient")
    mock_client_class = patcher.start()
    mock_client_instance = MagicMock()
    if error is not None:
        setattr(mock_client_instance, method, AsyncMock(side_effect=error))
    else:
        setattr(mock_client_instance, method, AsyncMock(return_value=response))
    mock_client_class.return_value.__aenter__ = AsyncMock(return_value=mock_client_instance)
    mock_client_class.return_value.__aexit__ = AsyncMock(return_value=None)
    return patcher, mock_client_instance


def make_response(status_code: int, payload=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    if status_code >= 400:
        request = httpx.Request("GET", "https://auth.example.test")
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "error", request=request, response=httpx.Response(status_code, request=request)
        )
    return response


class TestGetSession:
    """Tests for resolving access tokens."""

    @pytest.mark.asyncio
    async def test_missing_token_makes_no_request(self):
        client = make_client()
        patcher, instance = patch_http("get", make_response(200))
        try:
            assert await client.get_session(None) is None
            instance.get.assert_not_awaited()
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    async def test_unconfigured_service_means_no_session(self):
        client = make_client()
        client.base_url = ""

        assert await client.get_session("token") is None

    @pytest.mark.asyncio
    async def test_valid_token_returns_session(self):
        client = make_client()
        patcher, instance = patch_http(
            "get", make_response(200, {"id": "user-1", "email": "editor@example.test"})
        )
        try:
            session = await client.get_session("token-123")
        finally:
            patcher.stop()

        assert session == AuthSession(
            access_token="token-123", user_id="user-1", email="editor@example.test"
        )
        url = instance.get.await_args.args[0]
        headers = instance.get.await_args.kwargs["headers"]
        assert url == "https://auth.example.test/auth/v1/user"
        assert headers["Authorization"] == "Bearer token-123"
        assert headers["apikey"] == "anon-key"

    @pytest.mark.asyncio
    async def test_expired_token_returns_none(self):
        client = make_client()
        patcher, _ = patch_http("get", make_response(401))
        try:
            assert await client.get_session("expired") is None
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        client = make_client()
        patcher, _ = patch_http("get", make_response(500))
        try:
            with pytest.raises(AuthServiceError):
                await client.get_session("token")
        finally:
            patcher.stop()

    @pytest.mark.asyncio
    async def test_unreachable_service_raises(self):
        client = make_client()
        patcher, _ = patch_http("get", error=httpx.ConnectError("connection refused"))
        try:
            with pytest.raises(AuthServiceError):
                await client.get_session("token")
        finally:
            patcher.stop()


class TestListeners:
    """Tests for session change notifications."""

    @pytest.mark.asyncio
    async def test_listener_sees_sign_in_and_sign_out(self):
        client = make_client()
        events = []
        client.subscribe(lambda event, session: events.append((event, session)))

        patcher, _ = patch_http("get", make_response(200, {"id": "user-1"}))
        try:
            session = await client.get_session("token")
        finally:
            patcher.stop()

        patcher, instance = patch_http("post", make_response(204))
        try:
            await client.sign_out("token")
        finally:
            patcher.stop()

        assert events == [(SIGNED_IN, session), (SIGNED_OUT, None)]
        assert instance.post.await_args.args[0] == "https://auth.example.test/auth/v1/logout"

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_notifications(self):
        client = make_client()
        events = []
        unsubscribe = client.subscribe(lambda event, session: events.append(event))

        unsubscribe()
        unsubscribe()
        await client.sign_out(None)

        assert events == []

    @pytest.mark.asyncio
    async def test_sign_out_with_expired_token_still_signs_out(self):
        client = make_client()
        events = []
        client.subscribe(lambda event, session: events.append(event))

        patcher, _ = patch_http("post", make_response(401))
        try:
            await client.sign_out("expired")
        finally:
            patcher.stop()

        assert events == [SIGNED_OUT]

    @pytest.mark.asyncio
    async def test_sign_out_failure_raises_without_notifying(self):
        client = make_client()
        events = []
        client.subscribe(lambda event, session: events.append(event))

        patcher, _ = patch_http("post", error=httpx.ReadTimeout("timed out"))
        try:
            with pytest.raises(AuthServiceError):
                await client.sign_out("token")
        finally:
            patcher.stop()

        assert events == []

    @pytest.mark.asyncio
    async def test_repeated_lookups_notify_once(self):
        client = make_client()
        events = []
        client.subscribe(lambda event, session: events.append(event))

        patcher, instance = patch_http("get", make_response(200, {"id": "user-1"}))
        try:
            for _ in range(3):
                await client.get_session("token")
        finally:
            patcher.stop()

        assert instance.get.await_count == 3
        assert events == [SIGNED_IN]

    @pytest.mark.asyncio
    async def test_changed_session_notifies_again(self):
        client = make_client()
        events = []
        client.subscribe(lambda event, session: events.append((event, session and session.email)))

        patcher, _ = patch_http("get", make_response(200, {"id": "u", "email": "old@example.test"}))
        try:
            await client.get_session("token")
        finally:
            patcher.stop()
        patcher, _ = patch_http("get", make_response(200, {"id": "u", "email": "new@example.test"}))
        try:
            await client.get_session("token")
        finally:
            patcher.stop()

        assert events == [(SIGNED_IN, "old@example.test"), (SIGNED_IN, "new@example.test")]

    @pytest.mark.asyncio
    async def test_known_session_expiring_notifies_sign_out(self):
        client = make_client()
        events = []
        client.subscribe(lambda event, session: events.append(event))

        patcher, _ = patch_http("get", make_response(200, {"id": "user-1"}))
        try:
            await client.get_session("token")
        finally:
            patcher.stop()
        patcher, _ = patch_http("get", make_response(401))
        try:
            assert await client.get_session("token") is None
            assert await client.get_session("token") is None
        finally:
            patcher.stop()

        assert events == [SIGNED_IN, SIGNED_OUT]

    @pytest.mark.asyncio
    async def test_unknown_expired_token_is_silent(self):
        client = make_client()
        events = []
        client.subscribe(lambda event, session: events.append(event))

        patcher, _ = patch_http("get", make_response(403))
        try:
            await client.get_session("stale")
        finally:
            patcher.stop()

        assert events == []
