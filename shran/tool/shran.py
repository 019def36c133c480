"""Command line tool for fetching, caching and building proof of work nodes."""

import argparse
import asyncio
import logging
import sys
import traceback

from shran.config import ShranConfig
from shran.exceptions import ShranException
from . import auth, build, fetch, generate, options, remove

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shran",
        description="Fetch, cache and build customized proof of work blockchain nodes.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    auth.AuthAction.register(subparsers)
    fetch.FetchAction.register(subparsers)
    remove.RemoveAction.register(subparsers)
    generate.GenerateAction.register(subparsers)
    options.OptionsAction.register(subparsers)
    build.BuildAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Shran command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    config = ShranConfig.from_env()
    try:
        asyncio.run(action.run(config=config, **vars(args)))
    except ShranException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("shran error:", err, file=sys.stderr)
        for note in getattr(err, "__notes__", []):
            print(note, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
