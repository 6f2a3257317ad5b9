"""Fixtures for CLI tests."""

from pathlib import Path
from typing import List

import pytest
from typer.testing import CliRunner

from rit.cli.main import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def cli_workspace(tmp_path: Path) -> Path:
    """Create an empty working directory for CLI runs."""
    workspace = tmp_path / "cli_workspace"
    workspace.mkdir()
    return workspace


@pytest.fixture
def rit(runner: CliRunner, cli_workspace: Path):
    """Invoke the rit app against the test workspace.

    Returns:
        Callable taking the command-line arguments after ``--root``
    """

    def invoke(*args: str):
        argv: List[str] = ["--root", str(cli_workspace), *args]
        return runner.invoke(app, argv)

    return invoke


@pytest.fixture
def initialized(rit, cli_workspace: Path) -> Path:
    """Initialize a repository in the test workspace."""
    result = rit("init", "--quiet")
    if result.exit_code != 0:
        raise RuntimeError(f"Failed to initialize repo: {result.output}")
    return cli_workspace
