"""Configuration model exports.

    from slackbridge.config.models import StorageConfig, ObservabilityConfig
"""

from slackbridge.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from slackbridge.config.models.storage import BridgeAPIConfig, StorageConfig

__all__ = [
    "BridgeAPIConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "StorageConfig",
]
