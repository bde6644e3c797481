"""Shared test fixtures for the Slackbridge test suite."""

from collections.abc import Generator

import pytest

from slackbridge.config import get_settings
from slackbridge.config.settings import set_toml_config


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Start and finish every test with no cached settings or TOML layer."""
    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})
