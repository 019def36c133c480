"""Configuration objects for shran.

All filesystem locations used by the library are held by `ShranConfig` and
passed to constructors explicitly. Only the command line tool derives them
from the process environment.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
import os
from pathlib import Path

__all__ = [
    "ChainKind",
    "ShranConfig",
    "PROGNAME",
]

PROGNAME = "shran"
GH_TOKEN_FILENAME = "gh.yaml"
DOWNLOAD_MANIFEST_FILENAME = "manifest.yaml"
BUILD_CONFIG_FILENAME = "build.yaml"
BUILD_LOG_FILENAME = "build.log"
FILE_EXTENSION = ".tar.gz"


class ChainKind(StrEnum):
    """Supported blockchain projects, used to route cache directories."""

    BITCOIN = "bitcoin"

    @property
    def github_repo(self) -> str:
        """The upstream github repository as `owner/name`."""
        return _GITHUB_REPOS[self]

    @property
    def description(self) -> str:
        """Human readable name used as the prefix of manifest keys."""
        return _DESCRIPTIONS[self]

    def manifest_key(self, version: str) -> str:
        """Return the manifest key for a version e.g. `Bitcoin core v23.0`."""
        return f"{self.description} {version}"


_GITHUB_REPOS: dict[ChainKind, str] = {
    ChainKind.BITCOIN: "bitcoin/bitcoin",
}

_DESCRIPTIONS: dict[ChainKind, str] = {
    ChainKind.BITCOIN: "Bitcoin core",
}


@dataclass(frozen=True)
class ShranConfig:
    """Root locations for configuration, cache, and build files."""

    config_dir: Path
    """Directory holding the credential and manifest files."""

    cache_dir: Path
    """Directory holding one subdirectory per supported chain."""

    build_dir: Path
    """Directory holding the build strategy and build log."""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ShranConfig":
        """Derive the default locations from XDG variables and HOME."""
        env = os.environ if environ is None else environ
        home = Path(env.get("HOME") or Path.home())
        if xdg_config := env.get("XDG_CONFIG_HOME"):
            config_dir = Path(xdg_config) / PROGNAME
        else:
            config_dir = home / ".config" / PROGNAME
        if xdg_cache := env.get("XDG_CACHE_HOME"):
            cache_dir = Path(xdg_cache) / PROGNAME
        else:
            cache_dir = home / ".cache" / PROGNAME
        return cls(config_dir=config_dir, cache_dir=cache_dir, build_dir=Path.cwd())

    @property
    def token_file(self) -> Path:
        return self.config_dir / GH_TOKEN_FILENAME

    @property
    def manifest_file(self) -> Path:
        return self.config_dir / DOWNLOAD_MANIFEST_FILENAME

    @property
    def build_config_file(self) -> Path:
        return self.build_dir / BUILD_CONFIG_FILENAME

    @property
    def build_log_file(self) -> Path:
        return self.build_dir / BUILD_LOG_FILENAME

    def chain_dir(self, chain: ChainKind) -> Path:
        """Return the cache subdirectory for a chain."""
        return self.cache_dir / chain.value
