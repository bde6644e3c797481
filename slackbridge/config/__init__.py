"""Configuration for Slackbridge.

TOML layers from the config directory, overridden by ``SLACKBRIDGE_*``
environment variables.

Usage:
    from slackbridge.config import get_settings

    settings = get_settings()
    datastore = create_datastore(settings.storage)
"""

from functools import lru_cache

from slackbridge.config.loader import load_config
from slackbridge.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; see reload_settings()."""
    set_toml_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    """Re-read the TOML layers and environment."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["Settings", "get_settings", "reload_settings"]
