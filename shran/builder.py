"""Library for compiling an installed release with a set of build options.

A build runs the upstream autotools steps inside the extracted source tree:

```
./autogen.sh
./configure <flags from the build options>
make -j<jobs>
```

Output from every step is appended to a build log so that failures can be
diagnosed after the fact.
"""

from dataclasses import dataclass
import logging
import os
from pathlib import Path

import aiofiles

from . import command
from .build_options import BuildOptionRegistry
from .command import Command
from .context import operation
from .exceptions import CommandException, InputException

__all__ = [
    "BuildPlan",
    "run_build",
]

_LOGGER = logging.getLogger(__name__)


@dataclass
class BuildPlan:
    """The commands needed to compile a source tree."""

    source_dir: Path
    """The extracted release to build."""

    configure_args: list[str]
    """Arguments passed to `./configure`."""

    jobs: int = 1
    """Number of parallel make jobs."""

    @classmethod
    def from_registry(
        cls, source_dir: Path, registry: BuildOptionRegistry, jobs: int | None = None
    ) -> "BuildPlan":
        return cls(
            source_dir=source_dir,
            configure_args=registry.configure_args(),
            jobs=jobs or os.cpu_count() or 1,
        )

    def commands(self) -> list[Command]:
        """Return the commands to run, in order."""
        return [
            Command(["./autogen.sh"], cwd=self.source_dir, timeout=None),
            Command(
                ["./configure", *self.configure_args],
                cwd=self.source_dir,
                timeout=None,
            ),
            Command(["make", f"-j{self.jobs}"], cwd=self.source_dir, timeout=None),
        ]


async def run_build(commands: list[Command], log_file: Path) -> None:
    """Run the build commands in order, writing their output to the log file.

    Stops at the first failing command and raises its CommandException.
    """
    for cmd in commands:
        if cmd.cwd is None or not cmd.cwd.is_dir():
            raise InputException(f"Build directory {cmd.cwd} does not exist")
    async with aiofiles.open(str(log_file), mode="w") as log:
        for cmd in commands:
            _LOGGER.info("Running build step: %s", cmd)
            await log.write(f"$ {cmd}\n")
            with operation("Build step", command=cmd.string, log=log_file):
                try:
                    out = await command.run(cmd)
                except CommandException as err:
                    await log.write(f"{err}\n")
                    raise
            await log.write(out)
    _LOGGER.info("Build finished, log written to %s", log_file)
