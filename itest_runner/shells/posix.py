"""POSIX shell used on Unix build agents."""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from itest_runner.shells.base import CommandShell


@dataclass(frozen=True, kw_only=True)
class PosixShell(CommandShell):
    """Runs commands with ``sh -e``."""

    name: str = "posix"
    interpreter: str = "sh"

    @property
    def file_extension(self) -> str:
        """Shell scripts use ``.sh``."""
        return ".sh"

    def script_contents(self, command: str) -> str:
        """Script with a shebang line and the command."""
        return f"#!/bin/sh\n{command}\n"

    def build_command_line(self, script: Path) -> Sequence[str]:
        """Invoke the interpreter, stopping at the first failing line."""
        return [self.interpreter, "-e", str(script)]
