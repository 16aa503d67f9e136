"""Command shells module."""

from itest_runner.shells.base import CommandShell, normalize_separators
from itest_runner.shells.batch import BatchShell
from itest_runner.shells.loading import ShellNotFoundError, load_shell
from itest_runner.shells.posix import PosixShell

__all__ = [
    "BatchShell",
    "CommandShell",
    "PosixShell",
    "ShellNotFoundError",
    "load_shell",
    "normalize_separators",
]
