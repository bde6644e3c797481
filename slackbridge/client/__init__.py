"""Bridge provisioning API client.

Usage:
    from slackbridge.client import BridgeAPI, InMemorySessionCache

    api = await BridgeAPI.get_bridge_api(base_url, openid_provider, InMemorySessionCache())
    await api.verify()
"""

from slackbridge.client.client import (
    BridgeAPI,
    BridgeAPIError,
    InMemorySessionCache,
    OpenIDCredentials,
    OpenIDProvider,
    SessionCache,
)

__all__ = [
    "BridgeAPI",
    "BridgeAPIError",
    "InMemorySessionCache",
    "OpenIDCredentials",
    "OpenIDProvider",
    "SessionCache",
]
