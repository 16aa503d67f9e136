"""Fixtures for integration tests."""

from pathlib import Path
from typing import Protocol

import pytest

from itest_runner.models.context import BuildContext


class MakeToolFn(Protocol):
    """Protocol for fake executable creation function."""

    def __call__(self, name: str, body: str) -> Path:
        """Create an executable shell script and return its path."""


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create an empty job workspace."""
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def context(tmp_path: Path, workspace: Path) -> BuildContext:
    """Build context for run 1 with archive directories."""
    return BuildContext(
        workspace=str(workspace),
        run_id="1",
        log_path=tmp_path / "build.log",
        build_archive_dir=tmp_path / "archive" / "builds" / "1",
        project_archive_dir=tmp_path / "archive",
    )


@pytest.fixture
def make_tool(tmp_path: Path) -> MakeToolFn:
    """Return function to create fake iTest executables."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def _make(name: str, body: str) -> Path:
        tool = bin_dir / name
        tool.write_text(f"#!/bin/sh\n{body}\n")
        tool.chmod(0o755)
        return tool

    return _make
