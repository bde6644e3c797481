"""Logging and metrics configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]


class LoggingConfig(BaseModel):
    """structlog output settings, passed to setup_logging()."""

    level: LogLevel = Field(default="INFO", description="Minimum level emitted")
    format: LogFormat = Field(default="json", description="json or console renderer")
    redact_pii: bool = Field(
        default=True,
        description="Mask Slack/OpenID/session tokens and emails in log events",
    )


class MetricsConfig(BaseModel):
    """Prometheus endpoint exposing datastore counters."""

    enabled: bool = Field(default=True, description="Serve /metrics on startup")
    addr: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=9090, ge=1, le=65535, description="Bind port")


class ObservabilityConfig(BaseModel):
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
