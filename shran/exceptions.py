"""Exceptions related to shran."""

from pathlib import Path

__all__ = [
    "ShranException",
    "InputException",
    "ManifestFormatError",
    "UnrecognizedOptionError",
    "BuildFileError",
    "AlreadyInstalledError",
    "ManifestEntryError",
    "DuplicateEntryError",
    "EntryNotFoundError",
    "CredentialException",
    "CredentialNotFoundError",
    "CredentialReadError",
    "ArchiveFormatError",
    "CommandException",
]


class ShranException(Exception):
    """Generic base exception used for this library."""


class InputException(ShranException):
    """Raised when the input files or values are not formatted as expected."""


class ManifestFormatError(InputException):
    """Raised when the manifest file contents can't be decoded."""

    def __init__(self, manifest_path: Path | None, message: str) -> None:
        location = f" {manifest_path}" if manifest_path else ""
        super().__init__(f"Invalid manifest file{location}: {message}")
        self.manifest_path = manifest_path


class UnrecognizedOptionError(InputException):
    """Raised when a build option name is not part of the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unrecognized build option '{name}'")
        self.name = name


class BuildFileError(InputException):
    """Raised when a build strategy file is missing or invalid."""


class AlreadyInstalledError(ShranException):
    """Raised when a release archive or source tree already exists in the cache."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"{path} already exists in the cache")
        self.path = path


class ManifestEntryError(ShranException):
    """Raised for errors looking up or changing a manifest entry."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(message)
        self.key = key


class DuplicateEntryError(ManifestEntryError):
    """Raised when adding a key that is already in the manifest."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"'{key}' already exists in manifest file")


class EntryNotFoundError(ManifestEntryError):
    """Raised when a key does not exist in the manifest."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"'{key}' does not exist in manifest file")


class CredentialException(ShranException):
    """Base exception for reading the stored github credentials."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path


class CredentialNotFoundError(CredentialException):
    """Raised when the credential file does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(
            path, f"{path} not found, run `shran auth --token <TOKEN>` first"
        )


class CredentialReadError(CredentialException):
    """Raised when the credential file exists but can't be understood."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(path, f"Failed reading credentials from {path}: {reason}")


class ArchiveFormatError(ShranException):
    """Raised when an archive is not a valid compressed tar stream."""

    def __init__(self, archive: Path, reason: str) -> None:
        super().__init__(f"Unable to unpack archive {archive}: {reason}")
        self.archive = archive


class CommandException(ShranException):
    """Raised when there is a failure running a subcommand."""
