"""Value types produced by argument marshalling and consumed by the executor."""

from __future__ import annotations

import os
from collections import ChainMap
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import Field

from habitat_client.core.interfaces.model_bases import DomainModel, InternalDTO

# 1 MiB output buffer for the capturing strategies
DEFAULT_MAX_BUFFER = 1024 * 1024


class ExecutionOptions(DomainModel):
    """Execution settings gathered from directive keys."""

    max_buffer: int = Field(default=DEFAULT_MAX_BUFFER, gt=0)
    null_on_error: bool = False
    spawn: bool = False
    shell: bool = False
    preserve_env: bool = True
    passthrough: bool = False
    wait: bool = False
    timeout: float | None = Field(default=None, gt=0)
    # Forwarded verbatim to the asyncio subprocess factory (cwd, start_new_session, ...)
    extra: dict[str, Any] = Field(default_factory=dict)


class CommandEnvironment(Mapping[str, str]):
    """Environment handed to the child process.

    Reads check the overlay first and then fall back to the ambient snapshot.
    Neither the caller's overlay nor ``os.environ`` is ever written to.
    """

    def __init__(
        self,
        overlay: Mapping[str, str] | None = None,
        ambient: Mapping[str, str] | None = None,
    ) -> None:
        self._overlay: dict[str, str] = dict(overlay or {})
        self._ambient: dict[str, str] = dict(ambient or {})
        self._chain: ChainMap[str, str] = ChainMap(self._overlay, self._ambient)

    @classmethod
    def build(
        cls, overlay: Mapping[str, str], *, preserve_env: bool = True
    ) -> CommandEnvironment:
        """Layer ``overlay`` over a snapshot of the invoking process environment."""
        ambient = dict(os.environ) if preserve_env else None
        return cls(overlay, ambient)

    @property
    def overlay(self) -> dict[str, str]:
        return dict(self._overlay)

    def __getitem__(self, key: str) -> str:
        return self._chain[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._chain)

    def __len__(self) -> int:
        return len(self._chain)

    def to_dict(self) -> dict[str, str]:
        """Flatten both tiers into the mapping passed to the child process."""
        return dict(self._chain)


@dataclass
class MarshalledCommand(InternalDTO):
    """A fully classified exec() call."""

    command: str | None
    args: list[str]
    env: CommandEnvironment
    options: ExecutionOptions = field(default_factory=ExecutionOptions)
