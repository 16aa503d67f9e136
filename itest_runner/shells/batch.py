"""Batch file shell used on Windows build agents."""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from itest_runner.shells.base import CommandShell


@dataclass(frozen=True, kw_only=True)
class BatchShell(CommandShell):
    """Runs commands with ``cmd /c call``."""

    name: str = "batch"

    @property
    def file_extension(self) -> str:
        """Batch scripts use ``.bat``."""
        return ".bat"

    def script_contents(self, command: str) -> str:
        """Script that exits with the command's error level."""
        return f"{command}\r\nexit %ERRORLEVEL%"

    def build_command_line(self, script: Path) -> Sequence[str]:
        """Invoke ``cmd`` on the script."""
        return ["cmd", "/c", "call", str(script)]
