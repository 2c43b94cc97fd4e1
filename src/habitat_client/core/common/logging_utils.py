"""
Logging utilities for the Habitat client.

This module provides utilities for logging, including:
- Redaction of secrets carried in command environments
- Test/production environment tagging
- Routing structlog loggers through the standard library
"""

import logging
import os
import sys
from collections.abc import Mapping
from typing import Any, Literal

import structlog

DEFAULT_LOG_FORMAT = (
    "%(asctime)s [%(levelname)-8s] [%(env_tag)s] %(name)s:%(lineno)d %(message)s"
)


# Environment detection
def _is_running_under_pytest() -> bool:
    """Detect if we're running under pytest.

    Returns:
        True if running under pytest, False otherwise
    """
    return "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST") is not None


def _get_environment_tag() -> str:
    """Get the environment tag for logging.

    Returns:
        'test' if running under pytest, 'prod' otherwise
    """
    return "test" if _is_running_under_pytest() else "prod"


class EnvironmentTaggingFilter(logging.Filter):
    """Logging filter that adds environment tags to log records."""

    def __init__(self) -> None:
        super().__init__()
        self._env_tag = _get_environment_tag()

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.env_tag = self._env_tag
        return True


class EnvironmentTaggingFormatter(logging.Formatter):
    """Logging formatter that includes environment tags."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: Literal["%", "{", "$"] = "%",
    ) -> None:
        if fmt is None:
            fmt = DEFAULT_LOG_FORMAT
        super().__init__(fmt, datefmt, style=style)


# Substrings that mark an environment variable as secret
DEFAULT_REDACTED_MARKERS = (
    "token",
    "secret",
    "password",
    "key",
    "credentials",
)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger.

    Args:
        name: Optional logger name

    Returns:
        A structured logger
    """
    return structlog.get_logger(name)  # type: ignore


def redact(value: str, mask: str = "***") -> str:
    """Redact a sensitive value.

    Args:
        value: The value to redact
        mask: The mask to use

    Returns:
        The redacted value
    """
    if not value:
        return value

    # Keep first and last characters of long values
    if len(value) > 6:
        return f"{value[0:2]}{mask}{value[-2:]}"
    else:
        return mask


def redact_env(
    env: Mapping[str, Any],
    markers: tuple[str, ...] = DEFAULT_REDACTED_MARKERS,
    mask: str = "***",
) -> dict[str, Any]:
    """Redact secret-looking entries of an environment mapping.

    Args:
        env: The environment overlay to redact
        markers: Lower-case substrings identifying secret variable names
        mask: The mask to use

    Returns:
        A new dictionary safe to log
    """
    result: dict[str, Any] = {}
    for key, value in env.items():
        lowered = key.lower()
        if any(marker in lowered for marker in markers):
            result[key] = redact(value, mask) if isinstance(value, str) else mask
        else:
            result[key] = value
    return result


def configure_logging_with_environment_tagging(
    level: int = logging.INFO,
    log_format: str | None = None,
    log_file: str | None = None,
) -> None:
    """Configure logging with environment tagging.

    Args:
        level: Logging level
        log_format: Optional log format string
        log_file: Optional log file path
    """
    formatter = EnvironmentTaggingFormatter(fmt=log_format)
    tagging_filter = EnvironmentTaggingFilter()

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler()
    handlers.append(console_handler)

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(tagging_filter)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )

    # structlog loggers hand their events to the stdlib handlers above
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
