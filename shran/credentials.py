"""Module for storing and reading the github authentication token.

The token file is a small yaml document:

```yaml
github_authentication:
  token: ghp_...
```
"""

from dataclasses import dataclass
import logging
import os
from pathlib import Path

import aiofiles
from aiofiles.ospath import exists
from mashumaro import DataClassDictMixin
from mashumaro.codecs.yaml import yaml_decode, yaml_encode
import yaml

from .exceptions import CredentialNotFoundError, CredentialReadError, InputException

__all__ = [
    "GithubAuth",
    "read_token",
    "write_token",
]

_LOGGER = logging.getLogger(__name__)

TOKEN_FILE_MODE = 0o600


@dataclass
class GithubToken(DataClassDictMixin):
    """A personal access token for the github api."""

    token: str


@dataclass
class GithubAuth(DataClassDictMixin):
    """Contents of the credential file."""

    github_authentication: GithubToken

    @classmethod
    def from_token(cls, token: str) -> "GithubAuth":
        return cls(github_authentication=GithubToken(token=token))

    @property
    def token(self) -> str:
        return self.github_authentication.token


def _private_opener(path: str, flags: int) -> int:
    """Open a file readable only by the owner, also when it already exists."""
    fd = os.open(path, flags, TOKEN_FILE_MODE)
    os.fchmod(fd, TOKEN_FILE_MODE)
    return fd


async def write_token(token_file: Path, token: str) -> None:
    """Write the token to disk, replacing any previous contents."""
    if not token:
        raise InputException("Github token must not be empty")
    content = yaml_encode(GithubAuth.from_token(token), GithubAuth)
    async with aiofiles.open(
        str(token_file), mode="w", opener=_private_opener
    ) as fd:
        await fd.write(content)  # type: ignore[arg-type]
    _LOGGER.info("Wrote github token to %s", token_file)


async def read_token(token_file: Path) -> str:
    """Return the token stored on disk."""
    if not await exists(token_file):
        raise CredentialNotFoundError(token_file)
    async with aiofiles.open(str(token_file)) as fd:
        content = await fd.read()
    if not content.strip():
        raise CredentialReadError(token_file, "file is empty")
    try:
        auth = yaml_decode(content, GithubAuth)
    except yaml.YAMLError as err:
        raise CredentialReadError(token_file, f"not valid yaml: {err}") from err
    except (LookupError, ValueError, TypeError, AttributeError) as err:
        raise CredentialReadError(
            token_file, f"expected github_authentication.token: {err}"
        ) from err
    if not isinstance(auth.token, str) or not auth.token:
        raise CredentialReadError(token_file, "token is empty")
    return auth.token
