"""Prepare, describe and publish the HTML reports written by iTestRT."""

import asyncio
import html
import logging
import shutil
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from urllib.parse import quote

from itest_runner.errors import ReportError
from itest_runner.models.context import BuildContext
from itest_runner.models.report import ReportDescriptor
from itest_runner.paths import report_directory_name
from itest_runner.shells.base import normalize_separators

log = logging.getLogger(__name__)

DEFAULT_REPORT_NAME = "Spirent iTest Report"


def initialize_report_directory(workspace: str, run_id: str) -> Path:
    """Create the per-run report directory; an existing one is reused.

    Raises:
        ReportError: If the directory cannot be created

    """
    report_dir = Path(workspace) / report_directory_name(run_id)
    try:
        report_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ReportError(
            f"Cannot create report directory {report_dir}: {exc}"
        ) from exc
    log.info("Report directory ready: %s", report_dir)
    return report_dir


def report_basename(test_case: str) -> str:
    """File name of a test case without directories or extension."""
    return PurePosixPath(normalize_separators(test_case)).stem


def build_report_descriptors(
    test_cases: Sequence[str],
    workspace: str,
    run_id: str,
    report_name: str = DEFAULT_REPORT_NAME,
) -> Sequence[ReportDescriptor]:
    """Describe one report per test case, in test case order."""
    report_dir = f"{normalize_separators(workspace)}/{report_directory_name(run_id)}"
    descriptors: list[ReportDescriptor] = []
    for test_case in test_cases:
        basename = report_basename(test_case)
        descriptors.append(
            ReportDescriptor(
                report_name=f"{report_name}-{basename}",
                report_dir=report_dir,
                report_files=f"{basename}.html",
                keep_all=True,
                allow_missing=True,
            )
        )
    return descriptors


class ReportPublisher(ABC):
    """Publishes report directories so the build host can serve them."""

    @abstractmethod
    async def publish(
        self, descriptors: Sequence[ReportDescriptor], context: BuildContext
    ) -> None:
        """Publish every report.

        Raises:
            ReportError: If a report cannot be published

        """


def render_wrapper(descriptor: ReportDescriptor, files: Sequence[str]) -> str:
    """Index page linking to the archived report files."""
    links = "\n".join(
        f'    <li><a href="{quote(name)}">{html.escape(name)}</a></li>'
        for name in files
    )
    title = html.escape(descriptor.report_name)
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        f"<head><meta charset=\"utf-8\"><title>{title}</title></head>\n"
        "<body>\n"
        f"  <h1>{title}</h1>\n"
        "  <ul>\n"
        f"{links}\n"
        "  </ul>\n"
        "</body>\n"
        "</html>\n"
    )


@dataclass(frozen=True, kw_only=True)
class HtmlReportPublisher(ReportPublisher):
    """Archives report files next to the build and writes an index page.

    Reports of every run are kept when ``keep_all`` is set; otherwise the
    project-level copy is replaced by the latest one.
    """

    async def publish(
        self, descriptors: Sequence[ReportDescriptor], context: BuildContext
    ) -> None:
        """Archive each report in turn."""
        for descriptor in descriptors:
            await asyncio.to_thread(self.archive, descriptor, context)

    def archive(
        self, descriptor: ReportDescriptor, context: BuildContext
    ) -> Path | None:
        """Copy one report into its archive target.

        Returns:
            The archive directory, or None when a missing report is allowed

        """
        source = Path(descriptor.report_dir)
        files = [
            path
            for path in (source / name for name in descriptor.file_names)
            if path.is_file()
        ]

        if not files:
            if descriptor.allow_missing:
                log.warning(
                    "Report %s not found in %s, skipping",
                    descriptor.report_name,
                    source,
                )
                return None
            raise ReportError(
                f"Report {descriptor.report_name} not found in {descriptor.report_dir}"
            )

        try:
            target = descriptor.archive_target(context)
        except ValueError as exc:
            raise ReportError(str(exc)) from exc

        try:
            if not descriptor.keep_all and target.exists():
                shutil.rmtree(target)
            target.mkdir(parents=True, exist_ok=True)
            for path in files:
                shutil.copy2(path, target / path.name)
            (target / descriptor.wrapper_name).write_text(
                render_wrapper(descriptor, [path.name for path in files]),
                encoding="utf-8",
            )
        except OSError as exc:
            raise ReportError(
                f"Cannot archive report {descriptor.report_name}: {exc}"
            ) from exc

        log.info("Published %s to %s", descriptor.report_name, target)
        return target
