"""Resolution and download of upstream source releases.

A `ReleaseSource` turns a release identifier (the latest release, or a
specific tag) into a `ReleaseDescriptor` and the bytes of the release's source
archive. The cache consumes that output but never talks to the network
itself. Errors raised by a source are passed through to the caller and are
never retried here.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
import json
import logging

from mashumaro import DataClassDictMixin
from slugify import slugify

from . import command
from .command import Command
from .config import ChainKind, FILE_EXTENSION
from .exceptions import InputException

__all__ = [
    "ReleaseDescriptor",
    "ReleaseSource",
    "GithubReleaseSource",
]

_LOGGER = logging.getLogger(__name__)

GH_BIN = "gh"
CURL_BIN = "curl"
ARCHIVE_URL = "https://github.com/{repo}/archive/refs/tags/{tag}{ext}"
PUBLISHED_DATE_FORMAT = "%Y-%m-%d %H:%M:%S UTC"
_DOWNLOAD_TIMEOUT = 600.0


@dataclass(frozen=True, kw_only=True)
class ReleaseDescriptor:
    """A release resolved from the upstream repository."""

    author: str
    """Login of the user who published the release."""

    tag_name: str
    """The tag identifying the release e.g. `v23.0`."""

    release_branch: str
    """The branch or commit the release was cut from."""

    published_at: datetime | None = None
    """When the release was published, if known."""

    @property
    def published_date(self) -> str:
        """The publication time as stored in the manifest."""
        if self.published_at is None:
            return ""
        return self.published_at.strftime(PUBLISHED_DATE_FORMAT)

    @property
    def archive_file_name(self) -> str:
        """File name used for the downloaded archive in the cache."""
        name = slugify(
            self.tag_name, lowercase=False, regex_pattern=r"[^-a-zA-Z0-9._]+"
        )
        if not name:
            raise InputException(
                f"Tag '{self.tag_name}' can't be used as a file name"
            )
        return f"{name}{FILE_EXTENSION}"


class ReleaseSource(ABC):
    """Resolves and downloads releases for a chain."""

    @abstractmethod
    async def resolve(
        self, chain: ChainKind, tag: str | None = None
    ) -> ReleaseDescriptor:
        """Return the release for the tag, or the latest release when tag is None."""

    @abstractmethod
    async def fetch_archive(
        self, chain: ChainKind, release: ReleaseDescriptor
    ) -> bytes:
        """Return the contents of the release's source archive."""

    @abstractmethod
    async def list_tags(self, chain: ChainKind) -> list[str]:
        """Return the tags in the upstream repository.

        Not every tag corresponds to a published release, so a tag in this
        list may still fail to resolve.
        """


@dataclass
class GithubUser(DataClassDictMixin):
    login: str


@dataclass
class GithubRelease(DataClassDictMixin):
    """The subset of the github release api response that is used."""

    tag_name: str
    target_commitish: str
    author: GithubUser
    published_at: datetime | None = None

    def descriptor(self) -> ReleaseDescriptor:
        return ReleaseDescriptor(
            author=self.author.login,
            tag_name=self.tag_name,
            release_branch=self.target_commitish,
            published_at=self.published_at,
        )


class GithubReleaseSource(ReleaseSource):
    """Release source backed by the github api, using the `gh` cli.

    The stored token is passed to `gh` through the environment and is
    redacted from any logged command or error.
    """

    def __init__(self, token: str) -> None:
        """Initialize GithubReleaseSource."""
        self._token = token

    def _gh(self, *args: str) -> Command:
        return Command(
            [GH_BIN, "api", *args],
            env={"GH_TOKEN": self._token},
            redact=[self._token],
        )

    async def resolve(
        self, chain: ChainKind, tag: str | None = None
    ) -> ReleaseDescriptor:
        """Return the release for the tag, or the latest release when tag is None."""
        if tag:
            endpoint = f"repos/{chain.github_repo}/releases/tags/{tag}"
        else:
            endpoint = f"repos/{chain.github_repo}/releases/latest"
        _LOGGER.info("Resolving release %s", endpoint)
        out = await command.run(self._gh(endpoint))
        try:
            release = GithubRelease.from_dict(json.loads(out))
        except (ValueError, LookupError, TypeError, AttributeError) as err:
            raise InputException(
                f"Unexpected response from github for {endpoint}: {err}"
            ) from err
        _LOGGER.debug("Resolved release %s", release)
        return release.descriptor()

    async def fetch_archive(
        self, chain: ChainKind, release: ReleaseDescriptor
    ) -> bytes:
        """Return the contents of the release's source archive."""
        url = ARCHIVE_URL.format(
            repo=chain.github_repo, tag=release.tag_name, ext=FILE_EXTENSION
        )
        _LOGGER.info("Downloading %s", url)
        return await command.run_bytes(
            Command(
                [CURL_BIN, "--fail", "--silent", "--show-error", "--location", url],
                timeout=_DOWNLOAD_TIMEOUT,
            )
        )

    async def list_tags(self, chain: ChainKind) -> list[str]:
        """Return the tags in the upstream repository."""
        out = await command.run(
            self._gh(
                "--paginate", f"repos/{chain.github_repo}/tags", "--jq", ".[].name"
            )
        )
        return [line for line in out.splitlines() if line.strip()]
