"""Bootstrap module for wiring slackbridge from configuration.

Turns Settings into a ready-to-use persistence layer. Handles:
- Configuring structured logging
- Starting the Prometheus metrics endpoint when enabled
- Building and loading the embedded datastore

Example usage:

    from slackbridge.bootstrap import bootstrap

    ctx = await bootstrap()
    await ctx.datastore.upsert_room(room)

    async with await ctx.connect_bridge_api(openid_provider, cache) as api:
        users = await api.search_users("alice")
"""

from dataclasses import dataclass

import httpx
from prometheus_client import start_http_server

from slackbridge.client import BridgeAPI, OpenIDProvider, SessionCache
from slackbridge.config import get_settings
from slackbridge.config.settings import Settings
from slackbridge.datastore.stores import EmbeddedDatastore, create_datastore
from slackbridge.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


@dataclass
class BootstrapContext:
    """Settings and the datastore built from them."""

    settings: Settings
    datastore: EmbeddedDatastore

    async def connect_bridge_api(
        self,
        openid_provider: OpenIDProvider,
        cache: SessionCache,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> BridgeAPI:
        """Open a bridge API session using the configured endpoint."""
        config = self.settings.bridge_api
        return await BridgeAPI.get_bridge_api(
            config.base_url,
            openid_provider,
            cache,
            timeout=config.timeout,
            transport=transport,
        )


async def bootstrap(settings: Settings | None = None) -> BootstrapContext:
    """Configure observability and open the datastore.

    Args:
        settings: Settings to use (default: get_settings())

    Returns:
        BootstrapContext holding the settings and a loaded datastore
    """
    settings = settings or get_settings()

    log_config = settings.observability.logging
    setup_logging(
        level="DEBUG" if settings.debug else log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )

    metrics_config = settings.observability.metrics
    if metrics_config.enabled:
        start_http_server(metrics_config.port, addr=metrics_config.addr)
        logger.info(
            "metrics_server_started",
            addr=metrics_config.addr,
            port=metrics_config.port,
        )

    datastore = create_datastore(settings.storage)
    await datastore.load()

    logger.info(
        "bootstrap_complete",
        app_name=settings.app_name,
        backend=datastore.backend_name,
        reactions=datastore.supports_reactions,
    )
    return BootstrapContext(settings=settings, datastore=datastore)
