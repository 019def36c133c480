"""Representation of the releases installed in the local cache.

The manifest is a single yaml file mapping a human readable description of a
release to the details of its installation:

```yaml
Bitcoin core v23.0:
  version: v23.0
  published_date: 2022-04-25 14:17:32 UTC
  installation_location: /home/user/.cache/shran/bitcoin/bitcoin-23.0
```

The file is read once when a `VersionManifest` is loaded and rewritten in full
every time an entry is added or removed.
"""

from dataclasses import dataclass, fields
import logging
from pathlib import Path
from typing import Any

import aiofiles
from aiofiles.ospath import exists
from mashumaro import DataClassDictMixin
from mashumaro.codecs.yaml import yaml_encode
import yaml

from .exceptions import DuplicateEntryError, EntryNotFoundError, ManifestFormatError

__all__ = [
    "ManifestEntry",
    "Manifest",
    "VersionManifest",
    "parse_manifest",
    "format_manifest",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestEntry(DataClassDictMixin):
    """Details about a release extracted into the cache."""

    version: str
    """The release tag e.g. `v23.0`."""

    published_date: str
    """When the release was published e.g. `2022-04-25 14:17:32 UTC`."""

    installation_location: str
    """Absolute path to the extracted source tree."""


Manifest = dict[str, ManifestEntry]


def _check_entries(raw: Any, manifest_path: Path | None) -> dict[str, Any]:
    """Return the raw yaml content if it is a mapping of string valued entries.

    Values are checked before decoding since mashumaro converts anything
    assigned to a `str` field with `str()`.
    """
    if not isinstance(raw, dict):
        raise ManifestFormatError(
            manifest_path,
            f"expected a mapping of release entries, got {type(raw).__name__}",
        )
    for key, value in raw.items():
        if not isinstance(key, str):
            raise ManifestFormatError(
                manifest_path, f"entry key {key!r} is not a string"
            )
        if not isinstance(value, dict):
            raise ManifestFormatError(manifest_path, f"entry '{key}' is not a mapping")
        for entry_field in fields(ManifestEntry):
            if entry_field.name not in value:
                raise ManifestFormatError(
                    manifest_path, f"entry '{key}' is missing '{entry_field.name}'"
                )
            if not isinstance(field_value := value[entry_field.name], str):
                raise ManifestFormatError(
                    manifest_path,
                    f"entry '{key}' field '{entry_field.name}' must be a string, "
                    f"got {field_value!r}",
                )
    return raw


def parse_manifest(content: str, manifest_path: Path | None = None) -> Manifest:
    """Return the entries from the serialized contents of a manifest file.

    An empty file is a manifest with no entries.
    """
    try:
        raw = yaml.safe_load(content)
    except yaml.YAMLError as err:
        raise ManifestFormatError(manifest_path, f"not valid yaml: {err}") from err
    if raw is None:
        return {}
    return {
        key: ManifestEntry.from_dict(value)
        for key, value in _check_entries(raw, manifest_path).items()
    }


def format_manifest(entries: Manifest) -> str:
    """Return the serialized yaml contents of a manifest."""
    return yaml_encode(entries, Manifest)  # type: ignore[return-value]


class VersionManifest:
    """Durable index of installed releases keyed by description.

    This is the only writer of the manifest file. Every successful mutation
    rewrites the whole file before returning.
    """

    def __init__(self, manifest_path: Path, entries: Manifest | None = None) -> None:
        """Initialize VersionManifest."""
        self._manifest_path = manifest_path
        self._entries: Manifest = dict(entries or {})

    @classmethod
    async def load(cls, manifest_path: Path) -> "VersionManifest":
        """Read the manifest file, creating an empty one if it does not exist."""
        if not await exists(manifest_path):
            _LOGGER.info("Creating manifest file %s", manifest_path)
            async with aiofiles.open(str(manifest_path), mode="w"):
                pass
        async with aiofiles.open(str(manifest_path)) as manifest_file:
            content = await manifest_file.read()
        entries = parse_manifest(content, manifest_path)
        _LOGGER.debug("Loaded %d entries from %s", len(entries), manifest_path)
        return cls(manifest_path, entries)

    @property
    def path(self) -> Path:
        return self._manifest_path

    @property
    def entries(self) -> Manifest:
        """Return a copy of all entries."""
        return dict(self._entries)

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get_entry(self, key: str) -> ManifestEntry:
        """Return the entry for the key."""
        if (entry := self._entries.get(key)) is None:
            raise EntryNotFoundError(key)
        return entry

    async def add_entry(self, key: str, entry: ManifestEntry) -> None:
        """Add a new entry and rewrite the manifest file.

        Existing entries are never overwritten; remove the entry first to
        replace it.
        """
        if key in self._entries:
            raise DuplicateEntryError(key)
        self._entries[key] = entry
        try:
            await self._write()
        except BaseException:
            del self._entries[key]
            raise
        _LOGGER.info("Added '%s' to manifest %s", key, self._manifest_path)

    async def remove_entry(self, key: str) -> ManifestEntry:
        """Remove an entry, rewrite the manifest file, and return the entry."""
        if (entry := self._entries.pop(key, None)) is None:
            raise EntryNotFoundError(key)
        try:
            await self._write()
        except BaseException:
            self._entries[key] = entry
            raise
        _LOGGER.info("Removed '%s' from manifest %s", key, self._manifest_path)
        return entry

    async def _write(self) -> None:
        content = format_manifest(self._entries)
        async with aiofiles.open(str(self._manifest_path), mode="w") as manifest_file:
            await manifest_file.write(content)
