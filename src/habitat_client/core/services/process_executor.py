"""Run the binary using one of three strategies.

* direct: ``create_subprocess_exec`` and capture stdout
* shell: the joined command line through ``create_subprocess_shell``, captured
* spawn: a live :class:`SpawnedProcess` handle, optionally awaited to exit

Spawn takes precedence over shell when both are requested.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import subprocess
from asyncio.subprocess import Process
from typing import Any

from habitat_client.core.common.exceptions import (
    CommandExecutionError,
    CommandTimeoutError,
    OutputLimitExceededError,
    SpawnedProcessError,
)
from habitat_client.core.common.logging_utils import redact_env
from habitat_client.core.domain.execution import ExecutionOptions, MarshalledCommand
from habitat_client.core.interfaces.process_executor_interface import (
    ExecResult,
    IProcessExecutor,
)
from habitat_client.core.services.spawned_process import SpawnedProcess

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 64 * 1024


class _BoundedCapture:
    """Reads stdout and stderr of a child while enforcing a per-stream ceiling.

    When a stream passes the ceiling the child is killed and the rest of its
    output is drained and dropped.
    """

    def __init__(self, process: Process, limit: int) -> None:
        self._process = process
        self._limit = limit
        self.exceeded: str | None = None

    async def _read(self, stream: asyncio.StreamReader | None, name: str) -> bytes:
        if stream is None:
            return b""
        chunks: list[bytes] = []
        size = 0
        while True:
            chunk = await stream.read(_READ_CHUNK_SIZE)
            if not chunk:
                break
            if self.exceeded:
                continue
            size += len(chunk)
            if size > self._limit:
                chunks.append(chunk[: len(chunk) - (size - self._limit)])
                self.exceeded = name
                _kill(self._process)
                continue
            chunks.append(chunk)
        return b"".join(chunks)

    async def communicate(self) -> tuple[str, str, int]:
        stdout, stderr = await asyncio.gather(
            self._read(self._process.stdout, "stdout"),
            self._read(self._process.stderr, "stderr"),
        )
        code = await self._process.wait()
        return (
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
            code,
        )


def _kill(process: Process) -> None:
    # The child may already have exited
    with contextlib.suppress(ProcessLookupError):
        process.kill()


def _describe(binary: str, args: list[str]) -> str:
    return " ".join([binary, *args])


class ProcessExecutor(IProcessExecutor):
    """Default executor backed by asyncio subprocesses."""

    async def execute(self, binary: str, command: MarshalledCommand) -> ExecResult:
        options = command.options
        logger.debug("%s %s", binary, " ".join(command.args))
        if command.env.overlay:
            logger.debug("environment overlay: %s", redact_env(command.env.overlay))

        if options.spawn:
            return await self._spawn(binary, command)

        try:
            if options.shell:
                return await self._run_shell(binary, command)
            return await self._run_direct(binary, command)
        except CommandExecutionError as exc:
            if options.null_on_error:
                logger.debug("Suppressed failure of %s: %s", binary, exc.message)
                return None
            raise

    def _subprocess_kwargs(
        self, command: MarshalledCommand, *, stdin: int
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"stdin": stdin}
        kwargs.update(command.options.extra)
        kwargs.update(
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=command.env.to_dict(),
        )
        return kwargs

    async def _run_direct(self, binary: str, command: MarshalledCommand) -> str:
        description = _describe(binary, command.args)
        try:
            process = await asyncio.create_subprocess_exec(
                binary,
                *command.args,
                **self._subprocess_kwargs(command, stdin=subprocess.DEVNULL),
            )
        except OSError as exc:
            raise CommandExecutionError(
                f"Failed to launch {binary}: {exc}",
                details={"command": description},
                stderr=str(exc),
            ) from exc
        return await self._capture(process, description, command.options)

    async def _run_shell(self, binary: str, command: MarshalledCommand) -> str:
        description = _describe(binary, command.args)
        try:
            process = await asyncio.create_subprocess_shell(
                description,
                **self._subprocess_kwargs(command, stdin=subprocess.DEVNULL),
            )
        except OSError as exc:
            raise CommandExecutionError(
                f"Failed to launch shell for {binary}: {exc}",
                details={"command": description},
                stderr=str(exc),
            ) from exc
        return await self._capture(process, description, command.options)

    async def _capture(
        self, process: Process, description: str, options: ExecutionOptions
    ) -> str:
        capture = _BoundedCapture(process, options.max_buffer)
        details: dict[str, Any] = {"command": description, "pid": process.pid}

        try:
            if options.timeout is not None:
                stdout, stderr, code = await asyncio.wait_for(
                    capture.communicate(), timeout=options.timeout
                )
            else:
                stdout, stderr, code = await capture.communicate()
        except asyncio.TimeoutError:
            _kill(process)
            await process.wait()
            raise CommandTimeoutError(
                f"{description} timed out after {options.timeout} seconds",
                details=details,
                exit_code=process.returncode,
            ) from None

        if capture.exceeded:
            raise OutputLimitExceededError(
                f"{description} exceeded {capture.exceeded} buffer of {options.max_buffer} bytes",
                details=details,
                exit_code=code,
                stdout=stdout,
                stderr=stderr,
            )

        if code != 0:
            raise CommandExecutionError(
                f"{description} exited with code {code}",
                details=details,
                exit_code=code,
                stdout=stdout,
                stderr=stderr,
            )

        return stdout.strip()

    async def _spawn(
        self, binary: str, command: MarshalledCommand
    ) -> SpawnedProcess | None:
        options = command.options
        description = _describe(binary, command.args)
        try:
            process = await asyncio.create_subprocess_exec(
                binary,
                *command.args,
                **self._subprocess_kwargs(command, stdin=subprocess.PIPE),
            )
        except OSError as exc:
            raise CommandExecutionError(
                f"Failed to spawn {binary}: {exc}",
                details={"command": description},
                stderr=str(exc),
            ) from exc

        handle = SpawnedProcess(process, passthrough=options.passthrough)
        logger.debug("Spawned %s (PID %s)", description, handle.pid)

        if not options.wait:
            return handle

        # Nobody can feed input to a process we only wait on
        if process.stdin is not None:
            process.stdin.close()
        handle.discard_output()

        code = await handle.wait()
        if code != 0:
            raise SpawnedProcessError(
                f"{description} exited with code {code}",
                details={"command": description, "pid": handle.pid},
                code=code,
            )
        return None
