"""TOML configuration loader.

Settings are layered: ``default.toml`` first, then ``{SLACKBRIDGE_ENV}.toml``
merged over it, then ``SLACKBRIDGE_*`` environment variables (applied by
pydantic-settings, not here).
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "SLACKBRIDGE_CONFIG_DIR"
ENVIRONMENT_ENV = "SLACKBRIDGE_ENV"
DEFAULT_ENVIRONMENT = "development"

# How far up from the working directory to look for a config/ directory
_SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    """Locate the configuration directory.

    SLACKBRIDGE_CONFIG_DIR wins and must exist. Otherwise the nearest
    ``config/`` at or above the working directory is used.
    """
    explicit = os.environ.get(CONFIG_DIR_ENV)
    if explicit:
        path = Path(explicit)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {explicit}")
        return path

    for directory in [Path.cwd(), *Path.cwd().parents][:_SEARCH_DEPTH]:
        candidate = directory / "config"
        if candidate.is_dir():
            return candidate
    return Path("config")


def get_environment() -> str:
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")
    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base.

    Tables merge recursively; any other value in override replaces the
    one in base. Neither input is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config(
    config_dir: Path | None = None,
    environment: str | None = None,
) -> dict[str, Any]:
    """Load ``default.toml`` and merge the environment file over it.

    Args:
        config_dir: Directory to read (default: get_config_dir())
        environment: Environment name (default: get_environment())
    """
    config_dir = config_dir or get_config_dir()
    environment = environment or get_environment()

    default_path = config_dir / "default.toml"
    if not default_path.is_file():
        raise FileNotFoundError(
            f"Default configuration file not found: {default_path}. "
            f"Create config/default.toml or set {CONFIG_DIR_ENV}."
        )
    config = load_toml(default_path)

    env_path = config_dir / f"{environment}.toml"
    if env_path.is_file():
        config = deep_merge(config, load_toml(env_path))
    return config
