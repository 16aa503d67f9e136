"""Registry of command shells, one per build agent operating system."""

from importlib.metadata import entry_points

from itest_runner.errors import ConfigurationError
from itest_runner.shells.base import CommandShell

ENTRY_POINT_GROUP = "itest_runner.shells"

POSIX_SHELL_KEY = "posix"
BATCH_SHELL_KEY = "batch"


class ShellNotFoundError(ConfigurationError):
    """No shell is registered under the requested key."""


def available_shells() -> list[str]:
    """Keys of every registered shell, sorted."""
    return sorted({entry.name for entry in entry_points(group=ENTRY_POINT_GROUP)})


def load_shell(key: str) -> CommandShell:
    """Instantiate the shell registered under ``key``.

    Raises:
        ShellNotFoundError: If no shell is registered under the key, or the
            registered object is not a command shell

    """
    matches = entry_points(group=ENTRY_POINT_GROUP, name=key)
    if not matches:
        raise ShellNotFoundError(
            f"Shell '{key}' not found. Available shells: {available_shells()}"
        )

    shell_cls = next(iter(matches)).load()
    if not (isinstance(shell_cls, type) and issubclass(shell_cls, CommandShell)):
        raise ShellNotFoundError(f"Shell '{key}' is not a command shell")
    return shell_cls()
