"""Shran remove action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
from typing import cast

from shran.cache import LocalCacheStore
from shran.config import ShranConfig
from shran.install import uninstall_release
from shran.manifest import VersionManifest

_LOGGER = logging.getLogger(__name__)


class RemoveAction:
    """Remove an installed version."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "remove",
                help="Remove an installed version from the cache",
                description="Delete the extracted source tree of an installed version and its manifest entry.",
            ),
        )
        args.add_argument(
            "key",
            help="Name of the installed version e.g. 'Bitcoin core v23.0'",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        config: ShranConfig,
        key: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        store = LocalCacheStore(config)
        store.initialize()
        manifest = await VersionManifest.load(config.manifest_file)
        entry = await uninstall_release(store, manifest, key)
        print(f"Removed {key} from {entry.installation_location}")
