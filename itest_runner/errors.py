"""Error taxonomy for the iTest build step."""

from typing import ClassVar, Literal

type FailureStatus = Literal[
    "tool-error", "test-failure", "missing-log", "report-error"
]


class ITestRunnerError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(ITestRunnerError):
    """Raised when a configuration field is missing or invalid."""


class InvalidTestCaseError(ConfigurationError):
    """Raised when a test case identifier cannot be turned into a URI."""


class ExecutionError(ITestRunnerError):
    """Raised when an external command could not start or was interrupted."""


class RunFailure(ITestRunnerError):
    """Base for outcomes that end the current run."""

    status: ClassVar[FailureStatus]


class ToolError(RunFailure):
    """The export or execute tool reported a failure in its output."""

    status = "tool-error"


class TestFailure(RunFailure):
    """A test case reported a failed execution status."""

    __test__ = False

    status = "test-failure"


class MissingLogError(RunFailure):
    """The run log could not be found, so output cannot be validated."""

    status = "missing-log"


class ReportError(RunFailure):
    """The report directory could not be created or reports not published."""

    status = "report-error"
