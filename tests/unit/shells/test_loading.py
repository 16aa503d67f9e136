"""Tests for shell loading module."""

import pytest

from itest_runner.shells.batch import BatchShell
from itest_runner.errors import ConfigurationError
from itest_runner.shells.loading import (
    BATCH_SHELL_KEY,
    POSIX_SHELL_KEY,
    ShellNotFoundError,
    available_shells,
    load_shell,
)
from itest_runner.shells.posix import PosixShell


def test_load_shell_returns_instance() -> None:
    """Loads and instantiates a shell by key."""
    assert load_shell("posix") == PosixShell()


def test_load_shell_raises_for_unknown_shell() -> None:
    """Raises ShellNotFoundError for unknown shell key."""
    with pytest.raises(ShellNotFoundError) as exc_info:
        load_shell("powershell")

    assert "powershell" in str(exc_info.value)
    assert "Available shells" in str(exc_info.value)


@pytest.mark.parametrize(
    ("key", "expected"), [(POSIX_SHELL_KEY, PosixShell), (BATCH_SHELL_KEY, BatchShell)]
)
def test_registered_shells(key: str, expected: type) -> None:
    """Both host shells are registered."""
    assert isinstance(load_shell(key), expected)


def test_available_shells() -> None:
    """Lists the registered shell keys."""
    assert {POSIX_SHELL_KEY, BATCH_SHELL_KEY} <= set(available_shells())


def test_unknown_shell_is_a_configuration_error() -> None:
    """An unknown shell key is reported like any other bad setting."""
    with pytest.raises(ConfigurationError):
        load_shell("powershell")
