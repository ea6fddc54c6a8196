"""Starting and stopping a local `opencode serve` process."""

import asyncio
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from .client import ServerStartError
from .config import (
    SERVER_COMMAND,
    SERVER_HOSTNAME,
    SERVER_SHUTDOWN_TIMEOUT,
    SERVER_START_TIMEOUT,
)

LISTENING_RE = re.compile(r"listening on (https?://\S+)")


class OpenCodeServer:
    """A spawned server and the URL it reported."""

    def __init__(self, process: asyncio.subprocess.Process, url: str):
        self.process = process
        self.url = url
        self._drain = asyncio.create_task(self._drain_output())

    async def _drain_output(self) -> None:
        # Keep the pipe from filling up while the server runs
        assert self.process.stdout is not None
        while await self.process.stdout.readline():
            pass

    async def close(self) -> None:
        await _stop(self.process)
        self._drain.cancel()


async def _stop(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    process.terminate()
    try:
        await asyncio.wait_for(process.wait(), SERVER_SHUTDOWN_TIMEOUT)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()


async def _read_url(process: asyncio.subprocess.Process) -> str:
    assert process.stdout is not None
    seen: list[str] = []
    while True:
        line = await process.stdout.readline()
        if not line:
            await process.wait()
            output = "".join(seen).strip()
            raise ServerStartError(
                f"Server exited with code {process.returncode} before listening"
                + (f": {output}" if output else "")
            )
        text = line.decode(errors="replace")
        seen.append(text)
        match = LISTENING_RE.search(text)
        if match:
            return match.group(1)


async def spawn_server(
    command: str = SERVER_COMMAND,
    hostname: str = SERVER_HOSTNAME,
    port: int = 0,
    timeout: float = SERVER_START_TIMEOUT,
) -> OpenCodeServer:
    """Run ``<command> serve`` and wait until it reports where it listens."""
    try:
        process = await asyncio.create_subprocess_exec(
            command,
            "serve",
            f"--hostname={hostname}",
            f"--port={port}",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except FileNotFoundError as e:
        raise ServerStartError(f"'{command}' not found on PATH") from e

    try:
        url = await asyncio.wait_for(_read_url(process), timeout)
    except asyncio.TimeoutError as e:
        await _stop(process)
        raise ServerStartError(f"Server did not start within {timeout}s") from e
    return OpenCodeServer(process, url)


@asynccontextmanager
async def server_url(url: str | None, command: str = SERVER_COMMAND) -> AsyncIterator[str]:
    """Yield the given URL, or spawn a server for the duration of the block."""
    if url:
        yield url
        return
    server = await spawn_server(command)
    try:
        yield server.url
    finally:
        await server.close()
