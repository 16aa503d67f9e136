"""Classify run logs by the messages iTestCLI and iTestRT print."""

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from itest_runner.errors import MissingLogError
from itest_runner.models.result import NO_ERROR, Classification

log = logging.getLogger(__name__)

TOOL_ERROR_MARKERS: Sequence[str] = (
    "Error",
    "cannot find the path",
    "valid directory",
    "No project to be exported",
    "Failed to generate report",
)

TEST_FAILURE_MARKERS: Sequence[str] = ("Execution status:  Fail",)


def find_marker(line: str, markers: Sequence[str]) -> str | None:
    """Return the first marker contained in the line, if any."""
    return next((marker for marker in markers if marker in line), None)


def classify_lines(
    lines: Iterable[str],
    *,
    tool_errors: bool = True,
    test_failures: bool = True,
) -> Classification:
    """Classify log lines in a single pass.

    A tool error stops the scan immediately. A test failure is remembered and
    returned at the end unless a tool error shows up later. When only test
    failures are requested the first one stops the scan.

    Args:
        lines: Log lines, in order
        tool_errors: Look for export/execute tool failures
        test_failures: Look for failed test case statuses

    Returns:
        The classification with the first matching line

    """
    test_failure: Classification | None = None

    for line_number, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")

        if tool_errors and (marker := find_marker(line, TOOL_ERROR_MARKERS)):
            return Classification(
                kind="tool-error", line=line, line_number=line_number, marker=marker
            )

        if (
            test_failures
            and test_failure is None
            and (marker := find_marker(line, TEST_FAILURE_MARKERS))
        ):
            test_failure = Classification(
                kind="test-failure", line=line, line_number=line_number, marker=marker
            )
            if not tool_errors:
                return test_failure

    return test_failure or NO_ERROR


def classify_log(
    log_path: Path,
    *,
    tool_errors: bool = True,
    test_failures: bool = True,
) -> Classification:
    """Classify the run log file.

    Raises:
        MissingLogError: If the log file does not exist

    """
    try:
        with log_path.open(encoding="utf-8", errors="replace") as log_file:
            classification = classify_lines(
                log_file, tool_errors=tool_errors, test_failures=test_failures
            )
    except FileNotFoundError as exc:
        raise MissingLogError(f"Run log not found: {log_path}") from exc

    if classification.kind != "no-error":
        log.info(
            "Log line %d matched %r: %s",
            classification.line_number,
            classification.marker,
            classification.line,
        )
    return classification
