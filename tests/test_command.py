"""Tests for command library."""

import os
from pathlib import Path

import pytest

from shran.command import Command, run, run_bytes
from shran.exceptions import CommandException


async def test_command() -> None:
    """Test stdout parsing of a command."""
    result = await run(Command(["echo", "Hello"]))
    assert result == "Hello\n"


async def test_command_bytes() -> None:
    """Test reading raw stdout of a command."""
    result = await run_bytes(Command(["printf", "\\001\\002"]))
    assert result == b"\x01\x02"


async def test_command_cwd(tmp_path: Path) -> None:
    """Test running a command in a working directory."""
    result = await run(Command(["pwd"], cwd=tmp_path))
    assert Path(result.strip()).resolve() == tmp_path.resolve()


async def test_command_env() -> None:
    """Test extra environment variables are passed to the command."""
    result = await run(
        Command(["sh", "-c", "echo $SHRAN_TEST_VALUE"], env={"SHRAN_TEST_VALUE": "v1"})
    )
    assert result == "v1\n"


async def test_failed_command() -> None:
    """Test a failing command."""
    with pytest.raises(CommandException, match="return code 1"):
        await run(Command(["/bin/false"]))


async def test_command_not_found() -> None:
    """Test a command that is not installed."""
    with pytest.raises(CommandException, match="not found"):
        await run(Command(["shran-command-does-not-exist"]))


async def test_command_timeout() -> None:
    """Test a command that takes too long."""
    with pytest.raises(CommandException, match="timed out"):
        await run(Command(["sleep", "5"], timeout=0.1))


async def test_command_timeout_kills_process(tmp_path: Path) -> None:
    """Test a command that times out does not keep running."""
    pid_file = tmp_path / "pid"
    cmd = Command(["sh", "-c", f"echo $$ > {pid_file}; exec sleep 30"], timeout=0.5)
    with pytest.raises(CommandException, match="timed out"):
        await run(cmd)
    pid = int(pid_file.read_text())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


async def test_redacted_error() -> None:
    """Test that secrets are removed from the command and its errors."""
    cmd = Command(
        ["sh", "-c", "echo secret-value >&2; exit 3", "secret-value"],
        redact=["secret-value"],
    )
    assert "secret-value" not in str(cmd)
    with pytest.raises(CommandException, match="return code 3") as exc_info:
        await run(cmd)
    assert "secret-value" not in str(exc_info.value)
    assert "<redacted>" in str(exc_info.value)
