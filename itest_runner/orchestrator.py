"""Orchestrates one iTest build step: export, execute, report, classify."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from itest_runner.classifier import classify_log
from itest_runner.command import (
    RESOURCES_PROJECT,
    CommandLine,
    build_execute_command,
    build_export_command,
    build_report_target,
)
from itest_runner.errors import (
    ExecutionError,
    ReportError,
    RunFailure,
    TestFailure,
    ToolError,
)
from itest_runner.models.config import GlobalConfig, JobConfig
from itest_runner.models.context import BuildContext
from itest_runner.models.report import ReportDescriptor
from itest_runner.models.result import RunResult, RunStep
from itest_runner.paths import resolve_path, resolve_test_cases, workspace_uri
from itest_runner.reports import (
    DEFAULT_REPORT_NAME,
    ReportPublisher,
    build_report_descriptors,
    initialize_report_directory,
)
from itest_runner.shells.base import CommandShell

log = logging.getLogger(__name__)


def _enter_step(step: RunStep, context: BuildContext) -> RunStep:
    log.info("Run %s: %s step", context.run_id, step)
    return step


@dataclass(frozen=True, kw_only=True)
class ITestOrchestrator:
    """Runs the export and execute tools for one job and judges the run.

    Steps run strictly in sequence and the first failing step ends the run.
    """

    settings: GlobalConfig
    shell: CommandShell
    publisher: ReportPublisher
    report_name: str = DEFAULT_REPORT_NAME
    env: Mapping[str, str] | None = None

    async def run(self, job: JobConfig, context: BuildContext) -> RunResult:
        """Run the job and return its result.

        Args:
            job: Job configuration
            context: Build host context of this run

        Returns:
            Success, or the failure status together with the step it ended in

        Raises:
            ConfigurationError: If a test case identifier cannot be resolved

        """
        test_cases = resolve_test_cases(job.testcases)
        workspace_path = resolve_path(job.workspace, context.workspace, self.env)
        reports: Sequence[ReportDescriptor] = ()
        log.info("Starting run %s in %s", context.run_id, context.workspace)
        step = _enter_step("export", context)

        try:
            await self._export_projects(job.projects, workspace_path, context)

            report_target = None
            if job.test_report_required:
                step = _enter_step("report-init", context)
                report_target = await self._initialize_report(workspace_path, context)

            step = _enter_step("execute", context)
            command = build_execute_command(
                job,
                self.settings,
                workspace=context.workspace,
                test_cases=test_cases,
                report_target=report_target,
                env=self.env,
            )
            await self._run_checked(command, context)

            if job.test_report_required:
                step = _enter_step("report-finalize", context)
                reports = build_report_descriptors(
                    test_cases, context.workspace, context.run_id, self.report_name
                )
                await self.publisher.publish(reports, context)

            step = _enter_step("classify", context)
            self._check_test_failures(context)
        except RunFailure as exc:
            log.error("Run %s failed during %s: %s", context.run_id, step, exc)
            return RunResult(
                status=exc.status,
                step=step,
                message=str(exc),
                test_cases=test_cases,
                reports=reports,
            )

        log.info("Run %s succeeded", context.run_id)
        return RunResult(status="success", test_cases=test_cases, reports=reports)

    async def _export_projects(
        self, projects: str, workspace_path: str, context: BuildContext
    ) -> None:
        """Export projects into iTAR files with iTestCLI."""
        command = build_export_command(
            self.settings.cli_executable, workspace_path, projects
        )
        await self._run_checked(command, context)

    async def _initialize_report(
        self, workspace_path: str, context: BuildContext
    ) -> str:
        """Prepare report generation and return the ``--report`` target.

        Reports need the ``resources`` project exported as well.
        """
        await self._export_projects(RESOURCES_PROJECT, workspace_path, context)
        initialize_report_directory(context.workspace, context.run_id)

        try:
            uri = workspace_uri(context.workspace, is_unix=context.is_unix)
        except ValueError as exc:
            raise ReportError(f"Cannot build report URI: {exc}") from exc

        return build_report_target(uri, context.run_id)

    async def _run_checked(self, command: CommandLine, context: BuildContext) -> None:
        """Run a command and fail on tool errors in the run log.

        Execution failures are logged only; the log decides the outcome.

        Raises:
            ToolError: If the log contains a tool error message
            MissingLogError: If there is no log to check

        """
        log.info("Running: %s", command.masked())
        try:
            await self.shell.run(command.render(), context)
        except ExecutionError:
            log.warning("Command did not complete, checking its output", exc_info=True)

        classification = classify_log(context.log_path, test_failures=False)
        if classification.kind == "tool-error":
            raise ToolError(
                f"{command.executable} reported an error on log line "
                f"{classification.line_number}: {classification.line}"
            )

    def _check_test_failures(self, context: BuildContext) -> None:
        """Fail when any test case reported a failed execution status.

        Raises:
            TestFailure: If a failed status is found
            MissingLogError: If there is no log to check

        """
        classification = classify_log(context.log_path, tool_errors=False)
        if classification.kind == "test-failure":
            raise TestFailure(
                f"Test case failed on log line {classification.line_number}: "
                f"{classification.line}"
            )
