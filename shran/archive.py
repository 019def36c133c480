"""Library for unpacking downloaded release archives.

An `Archiver` knows how to unpack exactly one archive format. Source releases
are published as gzip compressed tarballs, handled by `TarGzArchiver`. Support
for another format is added with another `Archiver` implementation rather than
by branching inside the cache.
"""

from abc import ABC, abstractmethod
import logging
from pathlib import Path
import tarfile
import zlib

from .exceptions import ArchiveFormatError

__all__ = [
    "Archiver",
    "TarGzArchiver",
]

_LOGGER = logging.getLogger(__name__)

# Errors raised by tarfile/gzip for a stream that is not a valid tar.gz
_FORMAT_ERRORS = (tarfile.TarError, zlib.error, EOFError)


class Archiver(ABC):
    """Unpacks an archive file into a destination directory."""

    @abstractmethod
    def unpack(self, archive: Path, destination: Path) -> None:
        """Unpack the archive into the destination directory.

        The archive itself must be left untouched; removing it is the
        responsibility of the caller.
        """

    @abstractmethod
    def top_level_names(self, archive: Path) -> list[str]:
        """Return the names of the top level entries in the archive."""


class TarGzArchiver(Archiver):
    """Archiver for gzip compressed tar files (.tar.gz)."""

    def unpack(self, archive: Path, destination: Path) -> None:
        """Unpack the archive into the destination directory."""
        _LOGGER.debug("Unpacking %s to %s", archive, destination)
        try:
            with tarfile.open(archive, mode="r:gz") as tar:
                tar.extractall(destination, filter="data")
        except _FORMAT_ERRORS as err:
            raise ArchiveFormatError(archive, str(err)) from err

    def top_level_names(self, archive: Path) -> list[str]:
        """Return the names of the top level entries in the archive."""
        names: list[str] = []
        try:
            with tarfile.open(archive, mode="r:gz") as tar:
                for member in tar:
                    name = member.name
                    while name.startswith("./"):
                        name = name[2:]
                    name = name.split("/", 1)[0]
                    if name in ("", ".", "..") or name in names:
                        continue
                    names.append(name)
        except _FORMAT_ERRORS as err:
            raise ArchiveFormatError(archive, str(err)) from err
        return names
