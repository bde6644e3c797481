"""Structured logging configuration using structlog.

JSON output for production, console output for development. The bridge
moves Slack bot/user tokens, OpenID tokens and session bearer tokens
through the datastore and the API client, so a redaction processor masks
credentials both by field name and by shape before anything is rendered.
"""

import logging
import re
import sys
from collections.abc import Mapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

REDACTED = "[REDACTED]"

# Field names whose values are credentials wherever they appear
SECRET_KEYS: frozenset[str] = frozenset({
    "token",
    "access_token",
    "accesstoken",
    "bot_token",
    "slack_bot_token",
    "slack_user_token",
    "openid_token",
    "openidtoken",
    "session_token",
    "sessiontoken",
    "authorization",
    "password",
    "secret",
    "email",
})

# xoxb- bot, xoxp- user, xoxa-/xoxr- app and refresh, xoxs-/xoxo- legacy
SLACK_TOKEN_PATTERN = re.compile(r"xox[abposr]-[A-Za-z0-9-]+")
BEARER_PATTERN = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/=-]+")
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")


def scrub(text: str) -> str:
    """Mask credentials and email addresses embedded in free text."""
    text = SLACK_TOKEN_PATTERN.sub("[TOKEN]", text)
    text = BEARER_PATTERN.sub("Bearer [TOKEN]", text)
    return EMAIL_PATTERN.sub("[EMAIL]", text)


def redact_value(value: Any, key: Any = None) -> Any:
    """Return value with secrets masked, walking mappings and sequences."""
    if isinstance(key, str) and key.lower() in SECRET_KEYS:
        return REDACTED
    if isinstance(value, str):
        return scrub(value)
    if isinstance(value, Mapping):
        return {k: redact_value(v, k) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [redact_value(item) for item in value]
    return value


class SecretRedactor:
    """structlog processor applying redact_value to every event field."""

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, redact_value(event_dict))


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: "json" for production, "console" for development
        redact_pii: Whether to mask credentials and emails before rendering
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if redact_pii:
        processors.append(SecretRedactor())

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    level_num = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound to the given name (typically ``__name__``)."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
