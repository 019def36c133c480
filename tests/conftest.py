"""Shared test fixtures."""

from collections.abc import Callable
import io
from pathlib import Path
import tarfile

import pytest

from shran.config import ShranConfig

TarballFactory = Callable[[dict[str, str]], bytes]


def build_tarball(files: dict[str, str]) -> bytes:
    """Return the bytes of a .tar.gz holding the files (path -> contents)."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture(name="config")
def config_fixture(tmp_path: Path) -> ShranConfig:
    """Fixture for a config with all locations inside the test directory."""
    return ShranConfig(
        config_dir=tmp_path / "config",
        cache_dir=tmp_path / "cache",
        build_dir=tmp_path / "build",
    )


@pytest.fixture(name="tarball")
def tarball_fixture() -> TarballFactory:
    """Fixture for creating release archives."""
    return build_tarball


@pytest.fixture(name="release_tarball")
def release_tarball_fixture() -> bytes:
    """Fixture for an archive shaped like a bitcoin source release."""
    return build_tarball(
        {
            "bitcoin-23.0/README.md": "Bitcoin Core\n",
            "bitcoin-23.0/configure.ac": "AC_INIT\n",
            "bitcoin-23.0/src/bitcoind.cpp": "int main() {}\n",
        }
    )
