"""Shran options action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
import pathlib
from typing import cast

from shran.build_options import BuildOptionRegistry
from shran.config import ShranConfig
from shran.strategy import read_strategy

from .format import Column, TableFormatter

_LOGGER = logging.getLogger(__name__)

COLUMNS = [
    Column("name"),
    Column("enabled"),
    Column("flag"),
    Column("description"),
]


class OptionsAction:
    """Print the build options and their state."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "options",
                help="List the available build options",
                description="Print every build option with its state, either the defaults or as set by a strategy file.",
            ),
        )
        args.add_argument(
            "--strategy",
            type=pathlib.Path,
            default=None,
            help="Path to a build.yaml strategy to apply to the defaults",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        config: ShranConfig,  # pylint: disable=unused-argument
        strategy: pathlib.Path | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        if strategy:
            registry = (await read_strategy(strategy)).registry()
        else:
            registry = BuildOptionRegistry()
        rows = [
            {
                "name": str(name),
                "enabled": str(option.enabled),
                "flag": option.flag,
                "description": option.description,
            }
            for name, option in registry
        ]
        TableFormatter(COLUMNS).print(rows)
