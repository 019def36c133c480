"""
shran fetches, caches and builds releases of proof of work blockchain nodes.

The library is organized around a local cache of extracted source releases
and a manifest recording what has been installed:

- `cache` owns the cache directory layout and extracts release archives.
- `manifest` is the durable index of installed releases.
- `release` resolves and downloads releases from upstream.
- `build_options` is the catalog of compile time flags for a build.
"""

__all__ = [
    "archive",
    "build_options",
    "builder",
    "cache",
    "config",
    "credentials",
    "exceptions",
    "install",
    "manifest",
    "release",
    "strategy",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
