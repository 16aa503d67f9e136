"""Models for run and classification results."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from itest_runner.models.report import ReportDescriptor

type RunStatus = Literal[
    "success", "tool-error", "test-failure", "missing-log", "report-error"
]
type RunStep = Literal[
    "export", "report-init", "execute", "report-finalize", "classify"
]
type ClassificationKind = Literal["no-error", "tool-error", "test-failure"]


@dataclass(frozen=True, kw_only=True)
class Classification:
    """Outcome of scanning a run log.

    ``line``, ``line_number`` and ``marker`` describe the first matching line
    and are ``None`` when nothing matched.
    """

    kind: ClassificationKind
    line: str | None = None
    line_number: int | None = None
    marker: str | None = None


NO_ERROR = Classification(kind="no-error")


@dataclass(frozen=True, kw_only=True)
class RunResult:
    """Result of one build step run."""

    status: RunStatus
    step: RunStep | None = None
    message: str | None = None
    test_cases: Sequence[str] = ()
    reports: Sequence[ReportDescriptor] = ()

    @property
    def succeeded(self) -> bool:
        """Whether the run ended without any failure."""
        return self.status == "success"
