"""Resolve workspace placeholders and environment references in job fields."""

import os
import re
from collections.abc import Mapping, Sequence
from pathlib import PurePosixPath, PureWindowsPath

from itest_runner.errors import InvalidTestCaseError

PROJECT_SCHEME = "project://"
REPORT_DIR_PREFIX = "jenkins_test_reports_"

_WORKSPACE_PLACEHOLDER = re.compile(r"\$(?:\{workspace\}|workspace\b)", re.IGNORECASE)
_ABSOLUTE_PATH = re.compile(r"(?:[A-Za-z]:[\\/]|[\\/])")
_ENV_REFERENCE = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")
_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = ("/", "\\")


def resolve_path(
    value: str, workspace: str, env: Mapping[str, str] | None = None
) -> str:
    """Turn a user-supplied path into an absolute path inside the workspace.

    Args:
        value: Path as typed by the user, possibly containing ``${WORKSPACE}``
        workspace: Concrete workspace directory of the run
        env: Environment used for ``$NAME`` references (default: process env)

    Returns:
        The workspace followed by whatever comes after the placeholder, the
        value itself when it is already absolute, the workspace when the value
        is empty, or the value joined onto the workspace otherwise.

    """
    if (match := _WORKSPACE_PLACEHOLDER.search(value)) is not None:
        return workspace + expand_environment_variables(value[match.end() :], env)

    value = expand_environment_variables(value, env)

    if _ABSOLUTE_PATH.match(value):
        return value
    if not value:
        return workspace
    return join_workspace(workspace, value)


def join_workspace(workspace: str, relative: str) -> str:
    """Join a relative path onto the workspace with a single separator."""
    if workspace.endswith(_SEPARATORS) or relative.startswith(_SEPARATORS):
        return workspace + relative
    return f"{workspace}/{relative}"


def expand_environment_variables(
    value: str, env: Mapping[str, str] | None = None
) -> str:
    """Substitute ``$NAME`` references; unknown names are kept as written."""
    environment = os.environ if env is None else env

    def substitute(match: re.Match[str]) -> str:
        return environment.get(match.group(1), match.group(0))

    return _ENV_REFERENCE.sub(substitute, value)


def resolve_test_case(identifier: str) -> str:
    """Return the URI the runtime tool expects for a test case.

    Identifiers without a workspace placeholder are taken to be URIs already.
    ``${WORKSPACE}/suite/case.xml`` becomes ``project://suite/case.xml``.

    Raises:
        InvalidTestCaseError: If the placeholder is not at the start, nothing
            follows it, or what follows already carries a URI scheme

    """
    match = _WORKSPACE_PLACEHOLDER.search(identifier)
    if match is None:
        return identifier

    if match.start() != 0:
        raise InvalidTestCaseError(
            f"Test case '{identifier}' must start with the workspace placeholder"
        )

    remainder = identifier[match.end() :]
    if remainder.startswith(_SEPARATORS):
        remainder = remainder[1:]

    if not remainder:
        raise InvalidTestCaseError(f"Test case '{identifier}' names no test case")
    if "://" in remainder:
        raise InvalidTestCaseError(
            f"Test case '{identifier}' mixes the workspace placeholder with a URI"
        )

    return PROJECT_SCHEME + remainder


def resolve_test_cases(testcases: str) -> Sequence[str]:
    """Resolve a comma-separated test case list, keeping its order."""
    return [resolve_test_case(identifier) for identifier in split_list(testcases)]


def split_list(value: str) -> Sequence[str]:
    """Split a comma-separated field after removing all whitespace."""
    return [entry for entry in _WHITESPACE.sub("", value).split(",") if entry]


def workspace_uri(workspace: str, *, is_unix: bool) -> str:
    """Return the ``file:`` URI of the workspace directory."""
    path = PurePosixPath(workspace) if is_unix else PureWindowsPath(workspace)
    return path.as_uri()


def report_directory_name(run_id: str) -> str:
    """Name of the per-run report directory inside the workspace."""
    return f"{REPORT_DIR_PREFIX}{run_id}"
