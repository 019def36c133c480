"""Test helpers for shran tools."""

import pytest

from shran.tool.shran import main


def run_main(args: list[str], capsys: pytest.CaptureFixture[str]) -> str:
    """Run the command line tool in process and return its stdout."""
    main(args)
    return capsys.readouterr().out


def run_main_error(args: list[str], capsys: pytest.CaptureFixture[str]) -> str:
    """Run the command line tool expecting it to fail and return its stderr."""
    with pytest.raises(SystemExit) as exc_info:
        main(args)
    assert exc_info.value.code == 1
    return capsys.readouterr().err
