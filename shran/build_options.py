"""Registry of the compile time options for building a bitcoin node.

Each option is a `./configure` flag with a three way state. `YES` and `NO`
force the feature on or off, while `AUTO` leaves the decision to the
configure script's own detection (e.g. build the GUI only when Qt is found).
Disabling features that aren't needed gives faster builds and smaller
binaries, e.g. a node used only for rpc calls has no need for the wallet.

Example usage:
```python
from shran.build_options import BuildOptionRegistry, BuildOptionName, OptionEnabled

registry = BuildOptionRegistry()
registry.update(BuildOptionName.WALLET, OptionEnabled.NO)
print(registry.configure_args())
```
"""

from collections.abc import Iterator
from dataclasses import dataclass, replace
from enum import StrEnum
import logging
from typing import Any

from .exceptions import InputException, UnrecognizedOptionError

__all__ = [
    "OptionEnabled",
    "BuildOptionName",
    "BuildOption",
    "BuildOptionRegistry",
    "configure_flag",
]

_LOGGER = logging.getLogger(__name__)


class OptionEnabled(StrEnum):
    """State of a build option."""

    YES = "yes"
    NO = "no"
    AUTO = "auto"


class BuildOptionName(StrEnum):
    """Names of all supported build options."""

    WALLET = "wallet"
    SQLITE = "sqlite"
    BDB = "bdb"
    EBPF = "ebpf"
    MINIUPNPC = "miniupnpc"
    UPNP_DEFAULT = "upnp_default"
    NATPMP = "natpmp"
    NATPMP_DEFAULT = "natpmp_default"
    TESTS = "tests"
    GUI_TESTS = "gui_tests"
    BENCH = "bench"
    EXTENDED_FUNCTIONAL_TESTS = "extended_functional_tests"
    FUZZ = "fuzz"
    FUZZ_BINARY = "fuzz_binary"
    GUI = "gui"
    QRENCODE = "qrencode"
    DAEMON = "daemon"
    UTILS = "utils"
    LIBS = "libs"
    ZMQ = "zmq"
    EXTERNAL_SIGNER = "external_signer"
    MULTIPROCESS = "multiprocess"
    HARDENING = "hardening"
    REDUCE_EXPORTS = "reduce_exports"
    CCACHE = "ccache"
    LTO = "lto"
    ASM = "asm"
    THREADLOCAL = "threadlocal"
    WERROR = "werror"
    DEBUG = "debug"
    MAN = "man"


@dataclass(frozen=True)
class BuildOption:
    """A single configure flag and its state."""

    flag: str
    """The configure flag as documented upstream e.g. `--disable-wallet`."""

    enabled: OptionEnabled
    """Whether the feature is forced on, forced off, or detected."""

    description: str
    """Help text for the flag."""


_Y = OptionEnabled.YES
_N = OptionEnabled.NO
_A = OptionEnabled.AUTO

# Defaults mirror the upstream configure script
_DEFAULTS: dict[BuildOptionName, tuple[str, OptionEnabled, str]] = {
    BuildOptionName.WALLET: (
        "--disable-wallet",
        _Y,
        "disable wallet (enabled by default)",
    ),
    BuildOptionName.SQLITE: (
        "--with-sqlite",
        _A,
        "enable sqlite wallet support (default: auto, i.e., enabled if wallet is enabled and sqlite is found)",
    ),
    BuildOptionName.BDB: (
        "--without-bdb",
        _A,
        "disable bdb wallet support (default is enabled if wallet is enabled)",
    ),
    BuildOptionName.EBPF: (
        "--enable-ebpf",
        _A,
        "enable eBPF tracing (default is yes if sys/sdt.h is found)",
    ),
    BuildOptionName.MINIUPNPC: (
        "--with-miniupnpc",
        _A,
        "enable UPNP (default is yes if libminiupnpc is found)",
    ),
    BuildOptionName.UPNP_DEFAULT: (
        "--enable-upnp-default",
        _N,
        "if UPNP is enabled, turn it on at startup (default is no)",
    ),
    BuildOptionName.NATPMP: (
        "--with-natpmp",
        _A,
        "enable NAT-PMP (default is yes if libnatpmp is found)",
    ),
    BuildOptionName.NATPMP_DEFAULT: (
        "--enable-natpmp-default",
        _N,
        "if NAT-PMP is enabled, turn it on at startup (default is no)",
    ),
    BuildOptionName.TESTS: (
        "--disable-tests",
        _Y,
        "do not compile tests (default is to compile)",
    ),
    BuildOptionName.GUI_TESTS: (
        "--disable-gui-tests",
        _A,
        "do not compile GUI tests (default is to compile if GUI and tests enabled)",
    ),
    BuildOptionName.BENCH: (
        "--disable-bench",
        _Y,
        "do not compile benchmarks (default is to compile)",
    ),
    BuildOptionName.EXTENDED_FUNCTIONAL_TESTS: (
        "--enable-extended-functional-tests",
        _N,
        "enable expensive functional tests when using lcov (default no)",
    ),
    BuildOptionName.FUZZ: (
        "--enable-fuzz",
        _N,
        "build for fuzzing (default no). enabling this will disable all other targets",
    ),
    BuildOptionName.FUZZ_BINARY: (
        "--enable-fuzz-binary",
        _Y,
        "enable building of fuzz binary (default yes)",
    ),
    BuildOptionName.GUI: (
        "--with-gui",
        _A,
        "build bitcoin-qt GUI (default=auto)",
    ),
    BuildOptionName.QRENCODE: (
        "--with-qrencode",
        _A,
        "enable QR code support (default is yes if qt is enabled and libqrencode is found)",
    ),
    BuildOptionName.DAEMON: (
        "--with-daemon",
        _Y,
        "build bitcoind daemon (default=yes)",
    ),
    BuildOptionName.UTILS: (
        "--with-utils",
        _Y,
        "build bitcoin-cli bitcoin-tx bitcoin-util bitcoin-wallet (default=yes)",
    ),
    BuildOptionName.LIBS: (
        "--with-libs",
        _Y,
        "build libraries (default=yes)",
    ),
    BuildOptionName.ZMQ: (
        "--disable-zmq",
        _A,
        "disable ZMQ notifications (default is to enable if libzmq is found)",
    ),
    BuildOptionName.EXTERNAL_SIGNER: (
        "--enable-external-signer",
        _A,
        "compile external signer support (default is yes, requires Boost::Process)",
    ),
    BuildOptionName.MULTIPROCESS: (
        "--enable-multiprocess",
        _N,
        "build multiprocess bitcoin-node, bitcoin-wallet, and bitcoin-gui executables (experimental, default is no)",
    ),
    BuildOptionName.HARDENING: (
        "--disable-hardening",
        _A,
        "do not attempt to harden the resulting executables (default is to harden when possible)",
    ),
    BuildOptionName.REDUCE_EXPORTS: (
        "--enable-reduce-exports",
        _N,
        "attempt to reduce exported symbols in the resulting executables (default is no)",
    ),
    BuildOptionName.CCACHE: (
        "--disable-ccache",
        _A,
        "do not use ccache for building (default is to use if found)",
    ),
    BuildOptionName.LTO: (
        "--enable-lto",
        _N,
        "build using LTO (default is no)",
    ),
    BuildOptionName.ASM: (
        "--disable-asm",
        _Y,
        "disable assembly routines (enabled by default)",
    ),
    BuildOptionName.THREADLOCAL: (
        "--enable-threadlocal",
        _A,
        "enable features that depend on the c++ thread_local keyword (default is to enable if there is platform support)",
    ),
    BuildOptionName.WERROR: (
        "--enable-werror",
        _N,
        "treat compiler warnings as errors (default is no)",
    ),
    BuildOptionName.DEBUG: (
        "--enable-debug",
        _N,
        "use compiler flags and macros suited for debugging (default is no)",
    ),
    BuildOptionName.MAN: (
        "--disable-man",
        _Y,
        "do not install man pages (default is to install)",
    ),
}

# Flag prefixes as (turns feature on, turns feature off). The longer prefix of
# each family is checked first so `--without-` is not read as `--with-`.
_FLAG_FAMILIES = [
    ("--enable-", "--disable-"),
    ("--with-", "--without-"),
]


def configure_flag(option: BuildOption) -> str | None:
    """Return the configure argument for the option's state.

    An `AUTO` option returns None so that configure detects the feature.
    """
    if option.enabled == OptionEnabled.AUTO:
        return None
    for on_prefix, off_prefix in _FLAG_FAMILIES:
        for prefix in sorted((on_prefix, off_prefix), key=len, reverse=True):
            if option.flag.startswith(prefix):
                stem = option.flag[len(prefix) :]
                if option.enabled == OptionEnabled.YES:
                    return f"{on_prefix}{stem}"
                return f"{off_prefix}{stem}"
    raise InputException(f"Build option flag '{option.flag}' has an unknown form")


def _resolve(name: BuildOptionName | str) -> BuildOptionName:
    if isinstance(name, BuildOptionName):
        return name
    try:
        return BuildOptionName(name)
    except ValueError as err:
        raise UnrecognizedOptionError(str(name)) from err


def _coerce(value: OptionEnabled | str) -> OptionEnabled:
    if isinstance(value, OptionEnabled):
        return value
    if isinstance(value, str):
        try:
            return OptionEnabled(value.lower())
        except ValueError:
            pass
    raise InputException(
        f"Invalid build option value {value!r}, expected one of: "
        + ", ".join(str(v) for v in OptionEnabled)
    )


class BuildOptionRegistry:
    """The fixed catalog of build options.

    Options can only be changed through `update`; no option is ever added
    or removed after construction and the flag and description of an option
    never change.
    """

    def __init__(self) -> None:
        """Initialize the registry with the upstream defaults."""
        self._options: dict[BuildOptionName, BuildOption] = {
            name: BuildOption(flag=flag, enabled=enabled, description=description)
            for name, (flag, enabled, description) in _DEFAULTS.items()
        }

    def get(self, name: BuildOptionName | str) -> BuildOption:
        """Return the option with the given name."""
        return self._options[_resolve(name)]

    def update(self, name: BuildOptionName | str, value: OptionEnabled | str) -> None:
        """Set the state of an option.

        Raises UnrecognizedOptionError for names outside the catalog, leaving
        the registry unchanged.
        """
        option_name = _resolve(name)
        enabled = _coerce(value)
        _LOGGER.debug("Setting build option %s to %s", option_name, enabled)
        option = self._options[option_name]
        self._options[option_name] = replace(option, enabled=enabled)

    def __iter__(self) -> Iterator[tuple[BuildOptionName, BuildOption]]:
        return iter(self._options.items())

    def __len__(self) -> int:
        return len(self._options)

    def __contains__(self, name: object) -> bool:
        return name in self._options

    def to_dict(self) -> dict[str, Any]:
        """Return the state of every option keyed by name."""
        return {str(name): str(option.enabled) for name, option in self}

    def configure_args(self) -> list[str]:
        """Return the arguments for `./configure` in catalog order."""
        return [
            flag
            for _, option in self
            if (flag := configure_flag(option)) is not None
        ]
