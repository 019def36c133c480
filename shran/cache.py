"""Cache management for downloaded release archives and source trees.

The cache is laid out as one directory per supported chain:

```
<cache_dir>/bitcoin/v23.0.tar.gz      (transient, removed once extracted)
<cache_dir>/bitcoin/bitcoin-23.0/     (extracted source tree)
```

An archive is unpacked into a staging directory next to the final location
and then moved into place, so an existing source tree is never overwritten
by a later download of the same release.
"""

import asyncio
from collections.abc import Iterable
import logging
from pathlib import Path
from shutil import rmtree

import aiofiles
import aiofiles.os
from aiofiles.ospath import exists

from .archive import Archiver, TarGzArchiver
from .config import ChainKind, ShranConfig, FILE_EXTENSION
from .exceptions import AlreadyInstalledError, InputException

__all__ = [
    "LocalCacheStore",
]

_LOGGER = logging.getLogger(__name__)

STAGING_PREFIX = ".staging-"


class LocalCacheStore:
    """Owner of the on-disk cache directory tree.

    Guarantees at most one extracted copy of a release exists per chain. The
    store does not talk to the network and does not touch the manifest;
    callers record successful installs themselves.
    """

    def __init__(
        self,
        config: ShranConfig,
        archiver: Archiver | None = None,
        chains: Iterable[ChainKind] | None = None,
    ) -> None:
        """Initialize the LocalCacheStore."""
        self._config = config
        self._archiver = archiver or TarGzArchiver()
        self._chains = list(chains if chains is not None else ChainKind)

    @property
    def cache_dir(self) -> Path:
        return self._config.cache_dir

    def initialize(self) -> None:
        """Create the config, cache and per-chain directories if missing.

        Raises OSError if a directory can't be created for any reason other
        than it already existing.
        """
        for path in [
            self._config.config_dir,
            self._config.cache_dir,
            *[self.chain_dir(chain) for chain in self._chains],
        ]:
            _LOGGER.debug("Ensuring directory %s", path)
            path.mkdir(parents=True, exist_ok=True)

    def chain_dir(self, chain: ChainKind) -> Path:
        """Return the cache directory for the chain."""
        return self._config.chain_dir(chain)

    def archive_path(self, chain: ChainKind, archive_file_name: str) -> Path:
        """Return the location where a downloaded archive is written."""
        if not archive_file_name or Path(archive_file_name).name != archive_file_name:
            raise InputException(
                f"Archive file name must be a plain file name: '{archive_file_name}'"
            )
        return self.chain_dir(chain) / archive_file_name

    async def store_and_extract(
        self, chain: ChainKind, archive_file_name: str, archive_bytes: bytes
    ) -> Path:
        """Write the archive to the cache, extract it, and remove the archive.

        Returns the path of the extracted source tree.

        Raises AlreadyInstalledError without writing anything if the archive
        already exists in the cache, and also if the archive would unpack
        over an existing source tree. When extraction fails the archive is
        left on disk so the failure can be inspected; it must be removed
        before the release can be downloaded again.
        """
        archive = self.archive_path(chain, archive_file_name)
        if await exists(archive):
            raise AlreadyInstalledError(archive)

        _LOGGER.info("Writing %s (%d bytes)", archive, len(archive_bytes))
        async with aiofiles.open(archive, mode="wb") as archive_file:
            await archive_file.write(archive_bytes)

        chain_dir = self.chain_dir(chain)
        try:
            installation = await asyncio.to_thread(self._extract, chain_dir, archive)
        except AlreadyInstalledError:
            # Nothing was extracted, so the archive is not evidence of a failure
            await aiofiles.os.remove(archive)
            raise

        _LOGGER.info("Extracted %s to %s", archive, installation)
        await aiofiles.os.remove(archive)
        return installation

    def _extract(self, chain_dir: Path, archive: Path) -> Path:
        names = self._archiver.top_level_names(archive)
        for name in names:
            if (target := chain_dir / name).exists():
                raise AlreadyInstalledError(target)

        stem = archive.name.removesuffix(FILE_EXTENSION)
        staging = chain_dir / f"{STAGING_PREFIX}{stem}"
        if staging.exists():
            _LOGGER.warning("Removing stale staging directory %s", staging)
            rmtree(staging)
        staging.mkdir()
        try:
            self._archiver.unpack(archive, staging)
            for entry in staging.iterdir():
                entry.rename(chain_dir / entry.name)
        finally:
            rmtree(staging, ignore_errors=True)

        if len(names) == 1:
            return chain_dir / names[0]
        return chain_dir

    def remove_installation(self, installation: Path) -> None:
        """Delete an extracted source tree from the cache."""
        path = installation.resolve()
        root = self._config.cache_dir.resolve()
        chain_dirs = {self.chain_dir(chain).resolve() for chain in self._chains}
        if not path.is_relative_to(root) or path == root or path in chain_dirs:
            raise InputException(
                f"Refusing to remove {installation}: not an installation in {root}"
            )
        if not path.exists():
            _LOGGER.warning("Installation %s does not exist, nothing to remove", path)
            return
        _LOGGER.info("Removing installation %s", path)
        rmtree(path)
