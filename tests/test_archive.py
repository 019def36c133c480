"""Tests for the archive module."""

from collections.abc import Callable
from pathlib import Path

import pytest

from shran.archive import TarGzArchiver
from shran.exceptions import ArchiveFormatError

TarballFactory = Callable[[dict[str, str]], bytes]


def test_unpack(tmp_path: Path, tarball: TarballFactory) -> None:
    """Test extracting an archive into a directory."""
    archive = tmp_path / "v1.0.tar.gz"
    archive.write_bytes(
        tarball({"project-1.0/README": "hello\n", "project-1.0/src/a.c": "int a;\n"})
    )
    destination = tmp_path / "out"
    destination.mkdir()

    TarGzArchiver().unpack(archive, destination)

    assert (destination / "project-1.0" / "README").read_text() == "hello\n"
    assert (destination / "project-1.0" / "src" / "a.c").read_text() == "int a;\n"
    assert archive.exists()


def test_top_level_names(tmp_path: Path, tarball: TarballFactory) -> None:
    """Test listing the entries an archive creates in its destination."""
    archive = tmp_path / "archive.tar.gz"
    archive.write_bytes(
        tarball(
            {
                "./one/a": "a",
                "one/b": "b",
                "two": "2",
                ".hidden/c": "c",
            }
        )
    )
    assert TarGzArchiver().top_level_names(archive) == ["one", "two", ".hidden"]


def test_invalid_archive(tmp_path: Path) -> None:
    """Test reading bytes that are not a compressed tar stream."""
    archive = tmp_path / "bad.tar.gz"
    archive.write_bytes(b"this is not an archive")
    destination = tmp_path / "out"
    destination.mkdir()

    with pytest.raises(ArchiveFormatError, match="bad.tar.gz"):
        TarGzArchiver().unpack(archive, destination)
    with pytest.raises(ArchiveFormatError, match="bad.tar.gz"):
        TarGzArchiver().top_level_names(archive)
    assert archive.read_bytes() == b"this is not an archive"


def test_unsafe_member(tmp_path: Path, tarball: TarballFactory) -> None:
    """Test that an archive can't write outside of its destination."""
    archive = tmp_path / "escape.tar.gz"
    archive.write_bytes(tarball({"../escaped": "oops"}))
    destination = tmp_path / "out"
    destination.mkdir()

    with pytest.raises(ArchiveFormatError):
        TarGzArchiver().unpack(archive, destination)
    assert not (tmp_path / "escaped").exists()
