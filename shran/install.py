"""Installing and removing releases in the local cache.

Installing a release resolves it with a `ReleaseSource`, hands the archive to
the `LocalCacheStore` to be extracted, and finally records the installation
in the `VersionManifest`. The manifest is only updated once the source tree
is in place, so a failed download or extraction can be retried without
repairing the manifest first.
"""

from dataclasses import dataclass
import logging
from pathlib import Path

from .cache import LocalCacheStore
from .config import ChainKind
from .context import operation
from .exceptions import DuplicateEntryError
from .manifest import ManifestEntry, VersionManifest
from .release import ReleaseDescriptor, ReleaseSource

__all__ = [
    "InstallResult",
    "install_release",
    "uninstall_release",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallResult:
    """A release that was installed in the cache."""

    key: str
    entry: ManifestEntry
    release: ReleaseDescriptor


async def install_release(
    source: ReleaseSource,
    store: LocalCacheStore,
    manifest: VersionManifest,
    chain: ChainKind,
    tag: str | None = None,
) -> InstallResult:
    """Download, extract and record a release.

    The latest release is installed when no tag is given. Raises
    DuplicateEntryError without downloading anything when the release is
    already in the manifest.
    """
    with operation("Install release", chain=chain, tag=tag or "latest"):
        release = await source.resolve(chain, tag)
        key = chain.manifest_key(release.tag_name)
        if key in manifest:
            raise DuplicateEntryError(key)

        archive_bytes = await source.fetch_archive(chain, release)
        archive_file_name = release.archive_file_name
        with operation(
            "Store and extract", path=store.archive_path(chain, archive_file_name)
        ):
            installation = await store.store_and_extract(
                chain, archive_file_name, archive_bytes
            )

        entry = ManifestEntry(
            version=release.tag_name,
            published_date=release.published_date,
            installation_location=str(installation.resolve()),
        )
        with operation("Record installation", key=key, path=manifest.path):
            await manifest.add_entry(key, entry)
    _LOGGER.info("Installed %s at %s", key, entry.installation_location)
    return InstallResult(key=key, entry=entry, release=release)


async def uninstall_release(
    store: LocalCacheStore, manifest: VersionManifest, key: str
) -> ManifestEntry:
    """Remove an installed source tree and its manifest entry."""
    with operation("Uninstall release", key=key):
        entry = manifest.get_entry(key)
        store.remove_installation(Path(entry.installation_location))
        removed = await manifest.remove_entry(key)
    _LOGGER.info("Uninstalled %s", key)
    return removed
