"""Fixtures for the command line tool tests."""

from pathlib import Path

import pytest

from shran.config import ShranConfig


@pytest.fixture(autouse=True, name="cli_config")
def cli_config_fixture(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ShranConfig:
    """Point the tool at config, cache and build directories in the test directory."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))
    build_dir = tmp_path / "build"
    build_dir.mkdir()
    monkeypatch.chdir(build_dir)
    return ShranConfig.from_env()
