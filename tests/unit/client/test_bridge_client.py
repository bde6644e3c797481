"""Tests for the bridge provisioning API client."""

import json

import httpx
import pytest

from slackbridge.client import (
    BridgeAPI,
    BridgeAPIError,
    InMemorySessionCache,
    OpenIDCredentials,
)
from slackbridge.client.client import SESSION_TOKEN_KEY

BASE_URL = "http://bridge.test"


class StaticOpenID:
    """OpenID provider returning fixed credentials."""

    def __init__(self, creds: OpenIDCredentials) -> None:
        self.creds = creds
        self.calls = 0

    async def request_openid_token(self) -> OpenIDCredentials:
        self.calls += 1
        return self.creds


class RecordingHandler:
    """MockTransport handler that records requests and answers by path."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"error": "not found"})
        return response

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def openid() -> StaticOpenID:
    return StaticOpenID(
        OpenIDCredentials(matrix_server_name="hs.example", access_token="oid-token")
    )


@pytest.fixture
def cache() -> InMemorySessionCache:
    return InMemorySessionCache()


class TestGetBridgeAPI:
    """Tests for obtaining a session token."""

    @pytest.mark.asyncio
    async def test_exchanges_openid_token(self, openid, cache) -> None:
        handler = RecordingHandler(
            {("POST", "/v1/exchange_openid"): httpx.Response(200, json={"token": "sess-1"})}
        )

        api = await BridgeAPI.get_bridge_api(
            BASE_URL, openid, cache, transport=httpx.MockTransport(handler)
        )
        await api.close()

        assert cache.get(SESSION_TOKEN_KEY) == "sess-1"
        body = json.loads(handler.requests[0].content)
        assert body == {"matrixServer": "hs.example", "openIdToken": "oid-token"}

    @pytest.mark.asyncio
    async def test_reuses_valid_cached_token(self, openid, cache) -> None:
        cache.set(SESSION_TOKEN_KEY, "cached")
        handler = RecordingHandler(
            {("GET", "/v1/session"): httpx.Response(200, json={"userId": "@alice:hs"})}
        )

        api = await BridgeAPI.get_bridge_api(
            BASE_URL, openid, cache, transport=httpx.MockTransport(handler)
        )
        await api.close()

        assert openid.calls == 0
        assert handler.paths() == ["/v1/session"]
        assert handler.requests[0].headers["Authorization"] == "Bearer cached"

    @pytest.mark.asyncio
    async def test_rejected_cached_token_is_replaced(self, openid, cache) -> None:
        cache.set(SESSION_TOKEN_KEY, "stale")
        handler = RecordingHandler(
            {
                ("GET", "/v1/session"): httpx.Response(403, json={"error": "Forbidden"}),
                ("POST", "/v1/exchange_openid"): httpx.Response(200, json={"token": "fresh"}),
            }
        )

        api = await BridgeAPI.get_bridge_api(
            BASE_URL, openid, cache, transport=httpx.MockTransport(handler)
        )
        await api.close()

        assert handler.paths() == ["/v1/session", "/v1/exchange_openid"]
        assert cache.get(SESSION_TOKEN_KEY) == "fresh"

    @pytest.mark.asyncio
    async def test_failed_exchange_leaves_cache_empty(self, openid, cache) -> None:
        cache.set(SESSION_TOKEN_KEY, "stale")
        handler = RecordingHandler(
            {
                ("GET", "/v1/session"): httpx.Response(403, json={"error": "Forbidden"}),
                ("POST", "/v1/exchange_openid"): httpx.Response(500, text="boom"),
            }
        )

        with pytest.raises(BridgeAPIError) as exc_info:
            await BridgeAPI.get_bridge_api(
                BASE_URL, openid, cache, transport=httpx.MockTransport(handler)
            )

        assert exc_info.value.status_code == 500
        assert "boom" in exc_info.value.message
        assert cache.get(SESSION_TOKEN_KEY) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "creds",
        [
            OpenIDCredentials(matrix_server_name="hs.example"),
            OpenIDCredentials(access_token="oid-token"),
            OpenIDCredentials(),
        ],
    )
    async def test_missing_openid_values(self, cache, creds) -> None:
        handler = RecordingHandler({})

        with pytest.raises(BridgeAPIError, match="missing values"):
            await BridgeAPI.get_bridge_api(
                BASE_URL,
                StaticOpenID(creds),
                cache,
                transport=httpx.MockTransport(handler),
            )

        assert handler.requests == []


class TestRequest:
    """Tests for authenticated requests."""

    @pytest.mark.asyncio
    async def test_no_content(self) -> None:
        handler = RecordingHandler({("DELETE", "/v1/thing"): httpx.Response(204)})

        async with BridgeAPI(BASE_URL, "tok", transport=httpx.MockTransport(handler)) as api:
            assert await api.request("DELETE", "/v1/thing") is None

    @pytest.mark.asyncio
    async def test_json_body(self) -> None:
        handler = RecordingHandler({("GET", "/v1/thing"): httpx.Response(200, json={"a": 1})})

        async with BridgeAPI(BASE_URL, "tok", transport=httpx.MockTransport(handler)) as api:
            assert await api.request("GET", "/v1/thing") == {"a": 1}

        headers = handler.requests[0].headers
        assert headers["Authorization"] == "Bearer tok"
        assert headers["Cache-Control"] == "no-cache"

    @pytest.mark.asyncio
    async def test_error_message_from_body(self) -> None:
        handler = RecordingHandler(
            {("GET", "/v1/thing"): httpx.Response(400, json={"error": "Bad thing"})}
        )

        async with BridgeAPI(BASE_URL, "tok", transport=httpx.MockTransport(handler)) as api:
            with pytest.raises(BridgeAPIError) as exc_info:
                await api.request("GET", "/v1/thing")

        assert exc_info.value.message == "Bad thing"
        assert exc_info.value.body == {"error": "Bad thing"}
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_error_without_json_body(self) -> None:
        handler = RecordingHandler({("GET", "/v1/thing"): httpx.Response(502, text="gateway")})

        async with BridgeAPI(BASE_URL, "tok", transport=httpx.MockTransport(handler)) as api:
            with pytest.raises(BridgeAPIError, match="Request failed"):
                await api.request("GET", "/v1/thing")

    @pytest.mark.asyncio
    async def test_search_users(self) -> None:
        users = [{"userId": "@alice:hs", "displayName": "Alice"}]
        handler = RecordingHandler(
            {("POST", "/v1/searchUsers"): httpx.Response(200, json={"users": users})}
        )

        async with BridgeAPI(BASE_URL, "tok", transport=httpx.MockTransport(handler)) as api:
            assert await api.search_users("ali") == users

        assert json.loads(handler.requests[0].content) == {"query": "ali"}
