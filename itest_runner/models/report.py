"""Models for published HTML reports."""

from dataclasses import dataclass
from pathlib import Path

from itest_runner.models.context import BuildContext

WRAPPER_NAME = "htmlpublisher-wrapper.html"
ARCHIVE_DIR_NAME = "htmlreports"


@dataclass(frozen=True, kw_only=True)
class ReportDescriptor:
    """One HTML report directory to archive and publish.

    Attributes:
        report_name: Display name of the report link
        report_dir: Directory the report files are read from
        report_files: File (or comma-separated files) linked from the index
        keep_all: Archive reports of every run instead of only the latest
        allow_missing: Do not fail the run when the report is missing

    """

    report_name: str
    report_dir: str
    report_files: str
    keep_all: bool = True
    allow_missing: bool = True

    @property
    def sanitized_name(self) -> str:
        """Report name usable as a URL and directory name."""
        return self.report_name.replace(" ", "_")

    @property
    def file_names(self) -> list[str]:
        """Report file names, taken literally."""
        entries = (entry.strip() for entry in self.report_files.split(","))
        return [entry for entry in entries if entry]

    @property
    def wrapper_name(self) -> str:
        """Name of the index page that wraps the report files."""
        return WRAPPER_NAME

    def archive_target(self, context: BuildContext) -> Path:
        """Directory the report is archived into for the given run."""
        root = (
            context.build_archive_dir if self.keep_all else context.project_archive_dir
        )
        if root is None:
            scope = "build" if self.keep_all else "project"
            raise ValueError(f"No {scope} archive directory configured")
        return root / ARCHIVE_DIR_NAME / self.sanitized_name
