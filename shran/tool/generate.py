"""Shran generate action."""

from argparse import (
    ArgumentParser,
    BooleanOptionalAction,
    _SubParsersAction as SubParsersAction,
)
import logging
import pathlib
from typing import cast

from shran.build_options import BuildOptionRegistry
from shran.config import ChainKind, ShranConfig
from shran.exceptions import BuildFileError
from shran.strategy import BuildStrategy, write_strategy

_LOGGER = logging.getLogger(__name__)


class GenerateAction:
    """Generate a default build strategy file."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "generate",
                help="Generate a build configuration for a proof of work blockchain",
                description="""Write a build.yaml strategy with the default state
                    of every build option. Edit the file and pass it to
                    `shran build --strategy` to customize the node.""",
            ),
        )
        args.add_argument(
            "--btc",
            dest="chain",
            action="store_const",
            const=ChainKind.BITCOIN,
            default=ChainKind.BITCOIN,
            help="Generate a build.yaml configuration for the Bitcoin source code",
        )
        args.add_argument(
            "--output-file",
            type=pathlib.Path,
            default=None,
            help="Where to write the strategy (default: build.yaml in the current directory)",
        )
        args.add_argument(
            "--force",
            type=bool,
            action=BooleanOptionalAction,
            default=False,
            help="Overwrite an existing strategy file",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        config: ShranConfig,
        chain: ChainKind,
        output_file: pathlib.Path | None,
        force: bool,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        strategy_file = output_file or config.build_config_file
        if strategy_file.exists() and not force:
            raise BuildFileError(
                f"{strategy_file} already exists, use --force to overwrite it"
            )
        strategy = BuildStrategy.from_registry(BuildOptionRegistry(), chain)
        await write_strategy(strategy_file, strategy)
        print(f"Build strategy written to {strategy_file}")
