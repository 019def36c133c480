"""Shran auth action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
from typing import cast

from shran.cache import LocalCacheStore
from shran.config import ShranConfig
from shran.credentials import write_token

_LOGGER = logging.getLogger(__name__)


class AuthAction:
    """Store the github token used to query releases."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "auth",
                help="Authorize shran access to github via the api",
                description="Store a github personal access token used to list and resolve releases.",
            ),
        )
        args.add_argument(
            "--token",
            required=True,
            help="The github token",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        config: ShranConfig,
        token: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        LocalCacheStore(config).initialize()
        await write_token(config.token_file, token)
        print(f"Token written to {config.token_file}")
