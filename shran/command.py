"""Library for issuing commands using asyncio and returning the result."""

import asyncio
from contextlib import suppress
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .exceptions import CommandException

_LOGGER = logging.getLogger(__name__)

_CONCURRENCY = 4
_SEM = asyncio.Semaphore(_CONCURRENCY)
_TIMEOUT = 120.0


# No public API
__all__: list[str] = []


def format_path(path: Path) -> str:
    """Format path for debugging."""
    if path.is_absolute():
        cwd = Path.cwd()
        if path.is_relative_to(cwd):
            rel_path = str(path.relative_to(cwd))
            return f"{rel_path} (abs)"
    return str(path)


@dataclass
class Command:
    """An instance of a command to run."""

    cmd: list[str]
    """Array of command line arguments."""

    cwd: Path | None = None
    """Current working directory."""

    exc: type[CommandException] = CommandException
    """Exception to throw in case of an error."""

    env: dict[str, str] | None = None
    """Extra environment variables for the subprocess."""

    timeout: float | None = _TIMEOUT
    """Seconds to wait before giving up, or None to wait forever."""

    redact: list[str] | None = None
    """Values (e.g. tokens) that must never appear in logs or errors."""

    @property
    def string(self) -> str:
        """Render the command as a single string."""
        return " ".join([shlex.quote(arg) for arg in self.cmd])

    def _scrub(self, text: str) -> str:
        for secret in self.redact or []:
            if secret:
                text = text.replace(secret, "<redacted>")
        return text

    def __str__(self) -> str:
        """Render as a debug string."""
        cwd: str = ""
        if self.cwd:
            cwd = f"({format_path(self.cwd)}) "
        return self._scrub(f"{cwd}{self.string}")

    async def _communicate(self) -> tuple[int | None, bytes, bytes]:
        env = {
            **os.environ,
            **(self.env if self.env else {}),
        }
        proc = await asyncio.create_subprocess_exec(
            *self.cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=self.cwd,
            env=env,
        )
        try:
            out, err = await asyncio.wait_for(proc.communicate(), self.timeout)
        except (asyncio.TimeoutError, asyncio.CancelledError):
            with suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            raise
        return proc.returncode, out, err

    async def run(self) -> bytes:
        """Run the command, returning stdout."""
        _LOGGER.debug("Running command: %s", self)
        try:
            returncode, out, err = await self._communicate()
        except FileNotFoundError as error:
            raise self.exc(f"Command '{self}' not found: {error}") from error
        except asyncio.TimeoutError as error:
            raise self.exc(f"Command '{self}' timed out") from error
        if returncode:
            errors = [f"Command '{self}' failed with return code {returncode}"]
            if err:
                errors.append(self._scrub(err.decode("utf-8", errors="replace")))
            _LOGGER.debug("\n".join(errors))
            raise self.exc("\n".join(errors))
        return out


async def run_bytes(cmd: Command) -> bytes:
    """Run the specified command and return raw stdout."""
    async with _SEM:
        return await cmd.run()


async def run(cmd: Command) -> str:
    """Run the specified command and return stdout."""
    out = await run_bytes(cmd)
    return out.decode("utf-8")
