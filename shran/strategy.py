"""Library for reading and writing build strategy files.

A build strategy records the state of every build option so that a node can
be compiled the same way again:

```yaml
chain: bitcoin
options:
  wallet: 'no'
  sqlite: auto
  ...
```

Option names are validated against the `BuildOptionRegistry` when the
strategy is applied, so a typo in a hand edited file is reported instead of
being silently ignored.
"""

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any

import aiofiles
from aiofiles.ospath import exists
from mashumaro import DataClassDictMixin
from mashumaro.codecs.yaml import yaml_decode, yaml_encode
import yaml

from .build_options import BuildOptionRegistry, OptionEnabled
from .config import ChainKind
from .exceptions import BuildFileError

__all__ = [
    "BuildStrategy",
    "read_strategy",
    "write_strategy",
]

_LOGGER = logging.getLogger(__name__)


def _option_value(value: Any) -> OptionEnabled | str:
    # Unquoted yes/no are read as booleans by yaml
    if value is True:
        return OptionEnabled.YES
    if value is False:
        return OptionEnabled.NO
    return str(value)


@dataclass
class BuildStrategy(DataClassDictMixin):
    """The chain to build and the state of each build option."""

    chain: ChainKind = ChainKind.BITCOIN

    options: dict[str, Any] = field(default_factory=dict)
    """Build option name to `yes`, `no` or `auto`."""

    @classmethod
    def from_registry(
        cls, registry: BuildOptionRegistry, chain: ChainKind = ChainKind.BITCOIN
    ) -> "BuildStrategy":
        """Capture the current state of the registry."""
        return cls(chain=chain, options=registry.to_dict())

    def registry(self) -> BuildOptionRegistry:
        """Return a registry with the defaults overridden by this strategy.

        Raises UnrecognizedOptionError for unknown option names.
        """
        registry = BuildOptionRegistry()
        for name, value in self.options.items():
            registry.update(name, _option_value(value))
        return registry


async def write_strategy(strategy_file: Path, strategy: BuildStrategy) -> None:
    """Write the strategy to disk."""
    content = yaml_encode(strategy, BuildStrategy)
    async with aiofiles.open(str(strategy_file), mode="w") as fd:
        await fd.write(content)  # type: ignore[arg-type]
    _LOGGER.info("Wrote build strategy to %s", strategy_file)


async def read_strategy(strategy_file: Path) -> BuildStrategy:
    """Return the contents of a build strategy file."""
    if not await exists(strategy_file):
        raise BuildFileError(f"Build strategy file {strategy_file} does not exist")
    async with aiofiles.open(str(strategy_file)) as fd:
        content = await fd.read()
    if not content.strip():
        raise BuildFileError(f"Build strategy file {strategy_file} is empty")
    try:
        strategy = yaml_decode(content, BuildStrategy)
    except yaml.YAMLError as err:
        raise BuildFileError(
            f"Build strategy file {strategy_file} is not valid yaml: {err}"
        ) from err
    except (LookupError, ValueError, TypeError, AttributeError) as err:
        raise BuildFileError(
            f"Build strategy file {strategy_file} is not valid: {err}"
        ) from err
    if not isinstance(strategy.options, dict):
        raise BuildFileError(
            f"Build strategy file {strategy_file} options must be a mapping"
        )
    return strategy
