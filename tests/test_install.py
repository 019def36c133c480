"""Tests for installing releases into the cache."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from shran.cache import LocalCacheStore
from shran.config import ChainKind, ShranConfig
from shran.exceptions import (
    AlreadyInstalledError,
    DuplicateEntryError,
    EntryNotFoundError,
)
from shran.install import install_release, uninstall_release
from shran.manifest import VersionManifest
from shran.release import ReleaseDescriptor, ReleaseSource

RELEASE = ReleaseDescriptor(
    author="laanwj",
    tag_name="v23.0",
    release_branch="master",
    published_at=datetime(2022, 4, 25, 14, 17, 32, tzinfo=timezone.utc),
)


class FakeReleaseSource(ReleaseSource):
    """A release source that serves a single release from memory."""

    def __init__(self, release: ReleaseDescriptor, archive: bytes) -> None:
        self.release = release
        self.archive = archive
        self.fetched: list[str] = []

    async def resolve(
        self, chain: ChainKind, tag: str | None = None
    ) -> ReleaseDescriptor:
        return self.release

    async def fetch_archive(
        self, chain: ChainKind, release: ReleaseDescriptor
    ) -> bytes:
        self.fetched.append(release.tag_name)
        return self.archive

    async def list_tags(self, chain: ChainKind) -> list[str]:
        return [self.release.tag_name]


@pytest.fixture(name="store")
def store_fixture(config: ShranConfig) -> LocalCacheStore:
    """Fixture for an initialized cache store."""
    store = LocalCacheStore(config)
    store.initialize()
    return store


@pytest.fixture(name="manifest")
async def manifest_fixture(
    config: ShranConfig, store: LocalCacheStore
) -> VersionManifest:
    """Fixture for an empty manifest."""
    return await VersionManifest.load(config.manifest_file)


@pytest.fixture(name="source")
def source_fixture(release_tarball: bytes) -> FakeReleaseSource:
    """Fixture for a source serving the v23.0 release."""
    return FakeReleaseSource(RELEASE, release_tarball)


async def test_install_release(
    config: ShranConfig,
    store: LocalCacheStore,
    manifest: VersionManifest,
    source: FakeReleaseSource,
) -> None:
    """Test installing the latest release end to end."""
    result = await install_release(source, store, manifest, ChainKind.BITCOIN)

    installation = store.chain_dir(ChainKind.BITCOIN) / "bitcoin-23.0"
    assert result.key == "Bitcoin core v23.0"
    assert result.release == RELEASE
    assert result.entry.version == "v23.0"
    assert result.entry.published_date == "2022-04-25 14:17:32 UTC"
    assert result.entry.installation_location == str(installation.resolve())
    assert (installation / "README.md").exists()
    assert source.fetched == ["v23.0"]

    reloaded = await VersionManifest.load(config.manifest_file)
    assert reloaded.get_entry("Bitcoin core v23.0") == result.entry


async def test_install_duplicate(
    store: LocalCacheStore, manifest: VersionManifest, source: FakeReleaseSource
) -> None:
    """Test a release already in the manifest is not downloaded again."""
    await install_release(source, store, manifest, ChainKind.BITCOIN, "v23.0")

    with pytest.raises(DuplicateEntryError, match="Bitcoin core v23.0") as exc_info:
        await install_release(source, store, manifest, ChainKind.BITCOIN, "v23.0")
    assert exc_info.value.__notes__ == [
        "While running: Install release (chain=bitcoin, tag=v23.0)"
    ]
    assert source.fetched == ["v23.0"]


async def test_install_over_unrecorded_tree(
    store: LocalCacheStore, manifest: VersionManifest, source: FakeReleaseSource
) -> None:
    """Test a source tree on disk that is missing from the manifest."""
    existing = store.chain_dir(ChainKind.BITCOIN) / "bitcoin-23.0"
    existing.mkdir()

    with pytest.raises(AlreadyInstalledError, match="bitcoin-23.0") as exc_info:
        await install_release(source, store, manifest, ChainKind.BITCOIN)
    assert len(exc_info.value.__notes__) == 2
    assert exc_info.value.__notes__[0].startswith("While running: Store and extract")
    assert len(manifest) == 0
    assert list(existing.iterdir()) == []


async def test_uninstall_release(
    config: ShranConfig,
    store: LocalCacheStore,
    manifest: VersionManifest,
    source: FakeReleaseSource,
) -> None:
    """Test removing an installed release."""
    result = await install_release(source, store, manifest, ChainKind.BITCOIN)

    removed = await uninstall_release(store, manifest, result.key)

    assert removed == result.entry
    assert not Path(result.entry.installation_location).exists()
    assert (await VersionManifest.load(config.manifest_file)).entries == {}

    # The release can be installed again once removed
    await install_release(source, store, manifest, ChainKind.BITCOIN)
    assert "Bitcoin core v23.0" in manifest


async def test_uninstall_missing(
    store: LocalCacheStore, manifest: VersionManifest
) -> None:
    """Test removing a release that is not installed."""
    with pytest.raises(EntryNotFoundError, match="Bitcoin core v1.0"):
        await uninstall_release(store, manifest, "Bitcoin core v1.0")
