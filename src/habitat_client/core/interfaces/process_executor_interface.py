from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from habitat_client.core.domain.execution import MarshalledCommand
    from habitat_client.core.services.spawned_process import SpawnedProcess

# Captured text, None (suppressed error or completed wait) or a live handle
ExecResult = Union[str, "SpawnedProcess", None]


class IProcessExecutor(ABC):
    @abstractmethod
    async def execute(self, binary: str, command: MarshalledCommand) -> ExecResult:
        pass
