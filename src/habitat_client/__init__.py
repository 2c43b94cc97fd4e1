"""Python interface to the Habitat ``hab`` binary and its supervisor API."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from habitat_client.core.common.exceptions import (
    CommandExecutionError,
    CommandTimeoutError,
    ConfigurationError,
    HabError,
    OutputLimitExceededError,
    SpawnedProcessError,
    SupervisorApiError,
    SupervisorUnavailableError,
    UnsupportedArgumentError,
    VersionRequirementError,
)
from habitat_client.core.config.app_config import HabConfig, load_config
from habitat_client.core.interfaces.process_executor_interface import ExecResult
from habitat_client.core.services.spawned_process import SpawnedProcess
from habitat_client.hab import Hab

__version__ = "0.1.0"


@lru_cache(maxsize=None)
def get_default_hab() -> Hab:
    """Return the shared instance configured from the environment."""
    return Hab(load_config())


async def run(*args: Any) -> ExecResult:
    """Execute hab through the shared default instance."""
    return await get_default_hab().exec(*args)


__all__ = [
    "CommandExecutionError",
    "CommandTimeoutError",
    "ConfigurationError",
    "ExecResult",
    "Hab",
    "HabConfig",
    "HabError",
    "OutputLimitExceededError",
    "SpawnedProcess",
    "SpawnedProcessError",
    "SupervisorApiError",
    "SupervisorUnavailableError",
    "UnsupportedArgumentError",
    "VersionRequirementError",
    "get_default_hab",
    "load_config",
    "run",
]
