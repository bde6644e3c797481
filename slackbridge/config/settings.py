"""Root settings model for Slackbridge configuration."""

from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from slackbridge.config.models.observability import ObservabilityConfig
from slackbridge.config.models.storage import BridgeAPIConfig, StorageConfig

# Merged TOML layers, installed by get_settings() before Settings is built
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Install the merged TOML layers read by the next Settings()."""
    global _toml_config
    _toml_config = dict(config)


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source serving the installed TOML layers."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return {
            name: _toml_config[name]
            for name in self.settings_cls.model_fields
            if name in _toml_config
        }


class Settings(BaseSettings):
    """Slackbridge configuration.

    Precedence, highest first: constructor arguments, ``SLACKBRIDGE_*``
    environment variables (``__`` separates nested keys, e.g.
    ``SLACKBRIDGE_STORAGE__REACTIONS=true``), the TOML layers, then the
    defaults below.
    """

    model_config = SettingsConfigDict(
        env_prefix="SLACKBRIDGE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="slackbridge", description="Name bound to log events")
    debug: bool = Field(default=False, description="Force DEBUG logging")

    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Datastore backend",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Logging and metrics",
    )
    bridge_api: BridgeAPIConfig = Field(
        default_factory=BridgeAPIConfig,
        description="Bridge provisioning API client",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
