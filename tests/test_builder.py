"""Tests for compiling a release."""

from pathlib import Path

import pytest

from shran.build_options import BuildOptionName, BuildOptionRegistry, OptionEnabled
from shran.builder import BuildPlan, run_build
from shran.command import Command
from shran.exceptions import CommandException, InputException


def test_build_plan(tmp_path: Path) -> None:
    """Test the commands used to compile a source tree."""
    registry = BuildOptionRegistry()
    registry.update(BuildOptionName.WALLET, OptionEnabled.NO)

    plan = BuildPlan.from_registry(tmp_path, registry, jobs=8)

    commands = plan.commands()
    assert [cmd.cmd[0] for cmd in commands] == ["./autogen.sh", "./configure", "make"]
    assert commands[1].cmd[1:] == registry.configure_args()
    assert "--disable-wallet" in commands[1].cmd
    assert commands[2].cmd == ["make", "-j8"]
    assert all(cmd.cwd == tmp_path for cmd in commands)
    assert all(cmd.timeout is None for cmd in commands)


def test_build_plan_default_jobs(tmp_path: Path) -> None:
    """Test the number of make jobs defaults to at least one."""
    plan = BuildPlan.from_registry(tmp_path, BuildOptionRegistry())
    assert plan.jobs >= 1


async def test_run_build(tmp_path: Path) -> None:
    """Test the output of every step is written to the build log."""
    log_file = tmp_path / "build.log"
    await run_build(
        [
            Command(["echo", "step one"], cwd=tmp_path),
            Command(["echo", "step two"], cwd=tmp_path),
        ],
        log_file,
    )
    lines = log_file.read_text().splitlines()
    assert len(lines) == 4
    assert lines[0].startswith("$ ")
    assert lines[0].endswith("echo 'step one'")
    assert lines[1] == "step one"
    assert lines[2].endswith("echo 'step two'")
    assert lines[3] == "step two"


async def test_run_build_failure(tmp_path: Path) -> None:
    """Test a failing step stops the build."""
    log_file = tmp_path / "build.log"
    with pytest.raises(CommandException, match="return code 2") as exc_info:
        await run_build(
            [
                Command(["sh", "-c", "echo broken >&2; exit 2"], cwd=tmp_path),
                Command(["touch", "not-reached"], cwd=tmp_path),
            ],
            log_file,
        )
    assert exc_info.value.__notes__[0].startswith("While running: Build step")
    log = log_file.read_text()
    assert "failed with return code 2" in log
    assert "broken" in log
    assert not (tmp_path / "not-reached").exists()


async def test_run_build_missing_source(tmp_path: Path) -> None:
    """Test building a source tree that is not on disk."""
    log_file = tmp_path / "build.log"
    with pytest.raises(InputException, match="does not exist"):
        await run_build([Command(["make"], cwd=tmp_path / "missing")], log_file)
    assert not log_file.exists()
