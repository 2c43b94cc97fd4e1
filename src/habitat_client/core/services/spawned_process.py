"""Live handle around a spawned binary.

A spawned process keeps running after exec() returns. Its stdout and stderr
are read by one pump per stream; every consumer (line forwarding to the log,
output capture) attaches a sink to the pump instead of reading the pipe
itself, so a stream is never consumed twice.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
from asyncio.subprocess import Process
from collections.abc import Awaitable

from habitat_client.core.common.exceptions import SpawnedProcessError

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 64 * 1024


class OutputSink:
    """Receives raw chunks from a stream pump."""

    def feed(self, data: bytes) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Called once the stream reaches EOF."""


class DiscardSink(OutputSink):
    """Drains a stream without keeping anything."""

    def feed(self, data: bytes) -> None:
        pass


class BufferSink(OutputSink):
    """Accumulates everything written to a stream."""

    def __init__(self) -> None:
        self._chunks: list[bytes] = []

    def feed(self, data: bytes) -> None:
        self._chunks.append(data)

    def text(self) -> str:
        return b"".join(self._chunks).decode("utf-8", errors="replace")


class LineLogSink(OutputSink):
    """Forwards each complete line of a stream to a logger as it arrives."""

    def __init__(self, log: logging.Logger, level: int) -> None:
        self._log = log
        self._level = level
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    def feed(self, data: bytes) -> None:
        self._pending += self._decoder.decode(data)
        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            self._emit(line)

    def close(self) -> None:
        self._pending += self._decoder.decode(b"", final=True)
        if self._pending:
            self._emit(self._pending)
            self._pending = ""

    def _emit(self, line: str) -> None:
        self._log.log(self._level, "%s", line.rstrip("\r"))


class StreamPump:
    """Single reader of a child pipe that fans chunks out to sinks."""

    def __init__(self, reader: asyncio.StreamReader | None) -> None:
        self._reader = reader
        self._sinks: list[OutputSink] = []
        self._task: asyncio.Task[None] | None = None

    def attach(self, sink: OutputSink) -> None:
        """Add a sink, starting the pump on first use.

        A sink attached after EOF receives nothing but is still closed.
        """
        if self._task is not None and self._task.done():
            sink.close()
            return
        self._sinks.append(sink)
        if self._task is None and self._reader is not None:
            self._task = asyncio.ensure_future(self._run())

    async def _run(self) -> None:
        assert self._reader is not None
        while True:
            chunk = await self._reader.read(_READ_CHUNK_SIZE)
            if not chunk:
                break
            for sink in list(self._sinks):
                sink.feed(chunk)
        for sink in self._sinks:
            sink.close()

    async def drained(self) -> None:
        """Wait until the pump has forwarded everything up to EOF."""
        if self._task is not None:
            await self._task


class SpawnedProcess:
    """Handle returned by the spawn strategy.

    ``capture_output`` is memoized: every call returns the same awaitable,
    so independent callers share a single capture of the child's output.
    """

    def __init__(self, process: Process, *, passthrough: bool = False) -> None:
        self.process = process
        self._stdout = StreamPump(process.stdout)
        self._stderr = StreamPump(process.stderr)
        self._capture: asyncio.Future[str] | None = None

        if passthrough:
            self._stdout.attach(LineLogSink(logger, logging.INFO))
            self._stderr.attach(LineLogSink(logger, logging.ERROR))

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> int | None:
        return self.process.returncode

    @property
    def stdin(self) -> asyncio.StreamWriter | None:
        return self.process.stdin

    def capture_output(self, input: str | bytes | None = None) -> Awaitable[str]:
        """Collect stdout until the process exits.

        Args:
            input: Optional data written to stdin, which is then closed

        Returns:
            An awaitable resolving to the accumulated stdout text. It raises
            SpawnedProcessError carrying the partial output and exit code when
            the process exits non-zero.
        """
        if self._capture is None:
            output = BufferSink()
            errors = BufferSink()
            self._stdout.attach(output)
            self._stderr.attach(errors)
            self._capture = asyncio.ensure_future(self._collect(output, errors))

        if input:
            self._write_input(input)

        return self._capture

    async def capture_output_trimmed(self, input: str | bytes | None = None) -> str:
        return (await self.capture_output(input)).strip()

    def discard_output(self) -> None:
        """Keep both pipes drained so the child never blocks on a full pipe."""
        self._stdout.attach(DiscardSink())
        self._stderr.attach(DiscardSink())

    async def wait(self) -> int:
        """Wait for exit once attached pumps have flushed their sinks."""
        await asyncio.gather(self._stdout.drained(), self._stderr.drained())
        return await self.process.wait()

    def terminate(self) -> None:
        self.process.terminate()

    def kill(self) -> None:
        self.process.kill()

    async def _collect(self, output: BufferSink, errors: BufferSink) -> str:
        code = await self.wait()
        if code == 0:
            return output.text()
        raise SpawnedProcessError(
            f"Process {self.pid} exited with code {code}",
            details={"pid": self.pid},
            code=code,
            output=output.text(),
            stderr=errors.text(),
        )

    def _write_input(self, data: str | bytes) -> None:
        stdin = self.process.stdin
        if stdin is None or stdin.is_closing():
            logger.debug("stdin of process %s already closed, input dropped", self.pid)
            return
        stdin.write(data.encode("utf-8") if isinstance(data, str) else data)
        # close() flushes buffered data before closing the pipe
        stdin.close()
