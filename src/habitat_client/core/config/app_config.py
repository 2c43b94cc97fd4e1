from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator

from habitat_client.core.common.exceptions import ConfigurationError
from habitat_client.core.domain.execution import DEFAULT_MAX_BUFFER
from habitat_client.core.interfaces.model_bases import DomainModel

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "hab"
DEFAULT_SUPERVISOR_API = "http://localhost:9631"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _env_to_int(name: str, default: int, env: Mapping[str, str]) -> int:
    """Return an environment variable parsed as an integer."""
    value = env.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer %s=%r, using %s", name, value, default)
        return default


class HabConfig(DomainModel):
    """Settings resolved once when a Hab instance is constructed."""

    command: str = DEFAULT_COMMAND
    supervisor_api: str = DEFAULT_SUPERVISOR_API
    max_buffer: int = Field(default=DEFAULT_MAX_BUFFER, gt=0)
    log_level: str = "WARNING"

    @field_validator("command", "supervisor_api")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def from_env(cls, *, environ: Mapping[str, str] | None = None) -> HabConfig:
        """Create a HabConfig from environment variables.

        Recognised variables are ``HAB_CLIENT_COMMAND``,
        ``HAB_CLIENT_SUPERVISOR_API``, ``HAB_CLIENT_MAX_BUFFER`` and
        ``HAB_CLIENT_LOG_LEVEL``.
        """
        env: Mapping[str, str] = os.environ if environ is None else environ
        return cls.model_validate(_environment_overrides(env, cls()))


def _environment_overrides(env: Mapping[str, str], base: HabConfig) -> dict[str, Any]:
    config: dict[str, Any] = base.model_dump()
    if env.get("HAB_CLIENT_COMMAND"):
        config["command"] = env["HAB_CLIENT_COMMAND"]
    if env.get("HAB_CLIENT_SUPERVISOR_API"):
        config["supervisor_api"] = env["HAB_CLIENT_SUPERVISOR_API"]
    config["max_buffer"] = _env_to_int(
        "HAB_CLIENT_MAX_BUFFER", config["max_buffer"], env
    )
    if env.get("HAB_CLIENT_LOG_LEVEL"):
        config["log_level"] = env["HAB_CLIENT_LOG_LEVEL"]
    return config


def _load_config_file(path: Path) -> dict[str, Any]:
    if path.suffix.lower() not in [".yaml", ".yml"]:
        raise ConfigurationError(
            f"Unsupported configuration file format: {path.suffix}. Use YAML (.yaml/.yml).",
            details={"path": str(path)},
        )
    try:
        with open(path, encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            f"Invalid YAML in {path}: {exc}", details={"path": str(path)}
        ) from exc
    if not isinstance(file_config, dict):
        raise ConfigurationError(
            f"Configuration file {path} must contain a mapping",
            details={"path": str(path)},
        )
    return file_config


def load_config(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> HabConfig:
    """
    Load configuration from defaults, an optional YAML file and the environment.

    Environment variables win over the file, which wins over defaults.

    Args:
        config_path: Optional path to a YAML configuration file
        environ: Environment to read instead of ``os.environ``

    Returns:
        HabConfig instance

    Raises:
        ConfigurationError: If the file or the resulting values are invalid
    """
    env: Mapping[str, str] = os.environ if environ is None else environ

    try:
        config_data: dict[str, Any] = HabConfig().model_dump()

        if config_path:
            path = Path(config_path)
            if not path.exists():
                logger.warning(f"Configuration file not found: {config_path}")
            else:
                config_data.update(_load_config_file(path))

        base = HabConfig.model_validate(config_data)
        return HabConfig.model_validate(_environment_overrides(env, base))
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid configuration: {exc}",
            details={"errors": exc.errors(include_url=False)},
        ) from exc
