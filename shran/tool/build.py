"""Shran build action."""

from argparse import (
    ArgumentParser,
    BooleanOptionalAction,
    _SubParsersAction as SubParsersAction,
)
import logging
import pathlib
from typing import cast

from shran.builder import BuildPlan, run_build
from shran.cache import LocalCacheStore
from shran.config import ShranConfig
from shran.manifest import VersionManifest
from shran.strategy import read_strategy

_LOGGER = logging.getLogger(__name__)


class BuildAction:
    """Execute a compilation strategy."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "build",
                help="Execute a compilation strategy",
                description="""Compile an installed version with the build options
                    from a strategy file. Output is written to build.log in the
                    current directory.""",
            ),
        )
        args.add_argument(
            "--strategy",
            type=pathlib.Path,
            required=True,
            help="Path to a custom build.yaml strategy",
        )
        args.add_argument(
            "--version",
            required=True,
            help="Name of the installed version e.g. 'Bitcoin core v23.0'",
        )
        args.add_argument(
            "--jobs",
            "-j",
            type=int,
            default=None,
            help="Number of parallel make jobs (default: number of cpus)",
        )
        args.add_argument(
            "--dry-run",
            type=bool,
            action=BooleanOptionalAction,
            default=False,
            help="Print the build commands without running them",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        config: ShranConfig,
        strategy: pathlib.Path,
        version: str,
        jobs: int | None,
        dry_run: bool,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        registry = (await read_strategy(strategy)).registry()
        LocalCacheStore(config).initialize()
        manifest = await VersionManifest.load(config.manifest_file)
        entry = manifest.get_entry(version)
        plan = BuildPlan.from_registry(
            pathlib.Path(entry.installation_location), registry, jobs
        )
        commands = plan.commands()
        if dry_run:
            for cmd in commands:
                print(cmd)
            return
        await run_build(commands, config.build_log_file)
        print(f"Built {version}, log written to {config.build_log_file}")
