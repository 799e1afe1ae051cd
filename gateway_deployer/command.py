"""Library for running the helm and kubectl binaries as subprocesses.

Commands run with asyncio and at most `MAX_CONCURRENT_COMMANDS` at a time,
since every Gateway reconciliation may start its own helm and kubectl
processes. A command that exits non-zero raises the `exc` of the `Command`
with the captured output.
"""

import asyncio
from dataclasses import dataclass
import logging
import os
from pathlib import Path
import shlex
import subprocess

from .exceptions import CommandException

_LOGGER = logging.getLogger(__name__)

MAX_CONCURRENT_COMMANDS = 20
DEFAULT_TIMEOUT = 60.0

_SEM = asyncio.Semaphore(MAX_CONCURRENT_COMMANDS)


# No public API
__all__: list[str] = []


@dataclass
class Command:
    """A binary and its arguments."""

    cmd: list[str]
    """Array of command line arguments, starting with the binary."""

    cwd: Path | None = None
    """Working directory of the subprocess."""

    exc: type[CommandException] = CommandException
    """Exception to raise when the command fails."""

    env: dict[str, str] | None = None
    """Variables overriding the inherited environment."""

    def __str__(self) -> str:
        args = shlex.join(self.cmd)
        return f"({self.cwd}) {args}" if self.cwd else args

    def _failure(self, returncode: int, out: bytes, err: bytes) -> CommandException:
        lines = [f"Command '{self}' failed with return code {returncode}"]
        lines.extend(output.decode("utf-8") for output in (out, err) if output)
        message = "\n".join(lines)
        _LOGGER.debug(message)
        return self.exc(message)

    async def communicate(self, stdin: bytes | None = None) -> bytes:
        """Start the subprocess, send `stdin` and wait for it to exit.

        The subprocess is killed and reaped if the caller is cancelled.
        """
        _LOGGER.debug("Running command: %s", self)
        proc = await asyncio.create_subprocess_exec(
            *self.cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=self.cwd,
            env={**os.environ, **(self.env or {})},
        )
        try:
            out, err = await proc.communicate(stdin)
        except asyncio.CancelledError:
            if proc.returncode is None:
                proc.kill()
                await asyncio.shield(proc.wait())
            raise
        if proc.returncode:
            raise self._failure(proc.returncode, out, err)
        return out


async def run(
    cmd: Command, stdin: bytes | None = None, timeout: float | None = DEFAULT_TIMEOUT
) -> str:
    """Run the command and return its decoded stdout.

    The timeout starts once the command has a free slot.
    """
    async with _SEM:
        try:
            out = await asyncio.wait_for(cmd.communicate(stdin), timeout)
        except asyncio.TimeoutError as err:
            raise cmd.exc(f"Command '{cmd}' timed out after {timeout}s") from err
    return out.decode("utf-8")
