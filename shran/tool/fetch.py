"""Shran fetch action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
from typing import cast

from shran.cache import LocalCacheStore
from shran.config import ChainKind, ShranConfig
from shran.credentials import read_token
from shran.install import install_release
from shran.manifest import VersionManifest
from shran.release import GithubReleaseSource, ReleaseSource

from .format import Column, TableFormatter

_LOGGER = logging.getLogger(__name__)

LOCAL_COLUMNS = [
    Column("key", "name"),
    Column("version"),
    Column("published_date", "published"),
    Column("installation_location", "location"),
]


async def release_source(config: ShranConfig) -> ReleaseSource:
    """Return the release source authenticated with the stored token."""
    return GithubReleaseSource(await read_token(config.token_file))


class FetchAction:
    """List, download and manage source releases."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "fetch",
                help="List, download and manage source releases",
                description="""List, download and manage bitcoin source code from
                    github and on your local machine. Downloaded releases are
                    extracted into the cache and recorded in the manifest.""",
            ),
        )
        group = args.add_mutually_exclusive_group(required=True)
        group.add_argument(
            "--list-remote",
            action="store_true",
            help="List all tags available to download from the upstream repository",
        )
        group.add_argument(
            "--list-local",
            action="store_true",
            help="List versions already installed on your system",
        )
        group.add_argument(
            "--latest",
            action="store_true",
            help="Fetch the latest version release from github",
        )
        group.add_argument(
            "--tag",
            help="Download a version specified by tag",
        )
        args.add_argument(
            "--chain",
            type=ChainKind,
            choices=list(ChainKind),
            default=ChainKind.BITCOIN,
            help="The blockchain to fetch",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        config: ShranConfig,
        chain: ChainKind,
        list_remote: bool,
        list_local: bool,
        latest: bool,
        tag: str | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        store = LocalCacheStore(config)
        store.initialize()

        if list_remote:
            source = await release_source(config)
            for name in await source.list_tags(chain):
                print(name)
            return

        manifest = await VersionManifest.load(config.manifest_file)
        if list_local:
            rows = [
                {"key": key, **entry.to_dict()}
                for key, entry in sorted(manifest.entries.items())
            ]
            TableFormatter(LOCAL_COLUMNS, "No versions installed").print(rows)
            return

        source = await release_source(config)
        result = await install_release(
            source, store, manifest, chain, None if latest else tag
        )
        print(f"Installed {result.key} at {result.entry.installation_location}")
