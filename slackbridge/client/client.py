"""Bridge provisioning API client.

Exchanges a Matrix OpenID token for a bridge session token and uses it
as a bearer credential for further calls.

Usage:
    from slackbridge.client import BridgeAPI, InMemorySessionCache

    cache = InMemorySessionCache()
    async with await BridgeAPI.get_bridge_api(base_url, openid, cache) as api:
        users = await api.search_users("alice")
"""

from typing import Any, Protocol

import httpx
from pydantic import BaseModel

from slackbridge.observability.logging import get_logger

logger = get_logger(__name__)

SESSION_TOKEN_KEY = "slackbridge-sessionToken"


class BridgeAPIError(Exception):
    """Raised when the bridge API rejects a request."""

    def __init__(
        self,
        message: str,
        body: dict[str, Any] | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.body = body or {}
        self.status_code = status_code


class OpenIDCredentials(BaseModel):
    """OpenID token issued by the user's homeserver."""

    matrix_server_name: str | None = None
    access_token: str | None = None


class OpenIDProvider(Protocol):
    """Source of OpenID credentials (a widget API in the control-plane UI)."""

    async def request_openid_token(self) -> OpenIDCredentials: ...


class SessionCache(Protocol):
    """Storage for the bridge session token between client instances."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def clear(self, key: str) -> None: ...


class InMemorySessionCache:
    """SessionCache backed by a dict."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def clear(self, key: str) -> None:
        self._values.pop(key, None)


class BridgeAPI:
    """Async client for the bridge provisioning API.

    Attributes:
        base_url: Base URL of the bridge API
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._access_token = access_token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    async def get_bridge_api(
        cls,
        base_url: str,
        openid_provider: OpenIDProvider,
        cache: SessionCache,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "BridgeAPI":
        """Return a client holding a valid session token.

        A cached token is reused if the bridge still accepts it. Otherwise
        the cache is cleared and a fresh token is obtained by exchanging
        an OpenID token from the provider.
        """
        session_token = cache.get(SESSION_TOKEN_KEY)
        if session_token:
            client = cls(base_url, session_token, timeout=timeout, transport=transport)
            try:
                await client.verify()
                return client
            except (BridgeAPIError, httpx.HTTPError) as e:
                logger.warning("bridge_session_verify_failed", error=str(e))
                await client.close()
                cache.clear(SESSION_TOKEN_KEY)

        creds = await openid_provider.request_openid_token()
        if not creds.matrix_server_name or not creds.access_token:
            raise BridgeAPIError("Server OpenID response missing values")

        async with httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        ) as exchange_client:
            response = await exchange_client.post(
                "/v1/exchange_openid",
                json={
                    "matrixServer": creds.matrix_server_name,
                    "openIdToken": creds.access_token,
                },
                headers={"Cache-Control": "no-cache"},
            )
        if response.status_code != 200:
            raise BridgeAPIError(
                f"Response was not 200: {response.text}",
                status_code=response.status_code,
            )

        token = response.json()["token"]
        cache.set(SESSION_TOKEN_KEY, token)
        logger.info("bridge_session_exchanged", server=creds.matrix_server_name)
        return cls(base_url, token, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "BridgeAPI":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Cache-Control": "no-cache",
            "Authorization": f"Bearer {self._access_token}",
        }

    async def request(self, method: str, endpoint: str, body: Any = None) -> Any:
        """Make an authenticated API request.

        Returns None for 204 responses and the decoded JSON body for 200.
        Any other status raises BridgeAPIError carrying the response body.
        """
        response = await self._client.request(
            method=method,
            url=endpoint,
            headers=self._headers(),
            json=body,
        )
        if response.status_code == 204:
            return None
        if response.status_code == 200:
            return response.json()

        try:
            result_body = response.json()
        except ValueError:
            result_body = {}
        if not isinstance(result_body, dict):
            result_body = {}
        raise BridgeAPIError(
            result_body.get("error") or "Request failed",
            result_body,
            status_code=response.status_code,
        )

    async def verify(self) -> Any:
        """Check that the session token is still valid."""
        return await self.request("GET", "/v1/session")

    async def search_users(self, query: str) -> list[dict[str, Any]]:
        """Search Matrix users known to the bridge."""
        data = await self.request("POST", "/v1/searchUsers", {"query": query})
        return data["users"]
