"""
Interface to an executable ``hab`` binary available in the host environment.

``Hab.exec`` accepts any mix of strings, numbers and option mappings::

    await hab.exec("pkg", "install", "core/git", {"binlink": True})
    await hab.svc("status", {"$nullOnError": True})
    handle = await hab.studio("build", {"$passthrough": True})

Option mappings may carry ``$``-prefixed directives that pick the execution
strategy instead of becoming flags; see
:mod:`habitat_client.core.services.argument_marshaller`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from typing import Any

import httpx

from habitat_client.connectors.supervisor_api import SupervisorApiConnector
from habitat_client.core.common.exceptions import HabError, VersionRequirementError
from habitat_client.core.config.app_config import HabConfig
from habitat_client.core.domain.binary_version import parse_version_output
from habitat_client.core.interfaces.process_executor_interface import (
    ExecResult,
    IProcessExecutor,
)
from habitat_client.core.services.argument_marshaller import marshal_arguments
from habitat_client.core.services.process_executor import ProcessExecutor
from habitat_client.core.services.supervisor_status import parse_status_output
from habitat_client.core.services.version_range import satisfies

logger = logging.getLogger(__name__)


def _subcommand(
    attribute: str, name: str | None = None
) -> Callable[..., Coroutine[Any, Any, ExecResult]]:
    subcommand = name or attribute

    async def method(self: Hab, *args: Any) -> ExecResult:
        return await self.exec(subcommand, *args)

    method.__name__ = attribute
    method.__qualname__ = f"Hab.{attribute}"
    method.__doc__ = f"Run ``hab {subcommand}`` with the given arguments."
    return method


class Hab:
    """Represents and provides an interface to an executable hab binary."""

    def __init__(
        self,
        config: HabConfig | None = None,
        *,
        executor: IProcessExecutor | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = config or HabConfig()
        self.command = self.settings.command
        self._executor = executor or ProcessExecutor()
        self._supervisor = SupervisorApiConnector(self.settings.supervisor_api, client)

        # None until queried; False once the query failed
        self.version: str | None | bool = None
        self.build: str | None = None

    async def __aenter__(self) -> Hab:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the supervisor API client if this instance created it."""
        await self._supervisor.aclose()

    async def exec(self, *args: Any) -> ExecResult:
        """Execute hab with the given arguments.

        Returns:
            The stripped stdout for the capturing strategies, None when a
            failure was suppressed with ``$nullOnError`` or a ``$wait`` spawn
            finished, or a SpawnedProcess handle for ``$spawn``/``$passthrough``.

        Raises:
            UnsupportedArgumentError: For arguments that are neither tokens nor mappings
            CommandExecutionError: When the binary fails and errors are not suppressed
            SpawnedProcessError: When a ``$wait`` spawn exits non-zero
        """
        command = marshal_arguments(*args, max_buffer=self.settings.max_buffer)
        return await self._executor.execute(self.command, command)

    __call__ = exec

    async def get_version(self) -> str | None:
        """Get the version of the hab binary.

        The first call runs ``hab --version``; the outcome, including failure,
        is cached for the lifetime of this instance.

        Returns:
            Version reported by the binary, or None if not available
        """
        if self.version is None:
            try:
                parsed = parse_version_output(await self.exec({"version": True}))
            except HabError as exc:
                logger.debug("Could not query hab version: %s", exc)
                parsed = None

            if parsed is None:
                self.version = False
            else:
                self.version = parsed.version
                self.build = parsed.build

        return self.version or None

    async def satisfies_version(self, version_range: str) -> bool:
        """Check if the hab version falls inside ``version_range``."""
        return satisfies(await self.get_version(), version_range)

    async def require_version(self, version_range: str) -> Hab:
        """Ensure that the hab version is satisfied.

        Returns:
            This instance, for chaining

        Raises:
            VersionRequirementError: If the version range isn't satisfied
        """
        if not await self.satisfies_version(version_range):
            reported = await self.get_version()
            raise VersionRequirementError(
                f"Habitat version must be {version_range}, reported version is {reported}",
                required_range=version_range,
                reported_version=reported,
            )
        return self

    async def get_supervisor_status(self) -> list[dict[str, str | None]] | None:
        """Get the services loaded into the local supervisor.

        Returns:
            One record per service keyed by column header, or None if the
            supervisor is unavailable
        """
        try:
            output = await self.exec("svc", "status")
        except HabError as exc:
            logger.debug("Supervisor status unavailable: %s", exc)
            return None
        return parse_status_output(output if isinstance(output, str) else None)

    def get_supervisor_api(self) -> httpx.AsyncClient:
        """Get the HTTP client bound to the supervisor API base URL."""
        return self._supervisor.client

    async def get_services(self) -> Any:
        """Get the services reported by the supervisor HTTP API."""
        return await self._supervisor.get_services()

    # first-class methods for common hab subcommands
    bldr = _subcommand("bldr")
    cli = _subcommand("cli")
    config = _subcommand("config")
    file = _subcommand("file")
    help = _subcommand("help")
    origin = _subcommand("origin")
    pkg = _subcommand("pkg")
    plan = _subcommand("plan")
    ring = _subcommand("ring")
    studio = _subcommand("studio")
    sup = _subcommand("sup")
    support_bundle = _subcommand("support_bundle", "supportbundle")
    svc = _subcommand("svc")
    user = _subcommand("user")
