"""CLI entry point for the iTest build step."""

import argparse
import asyncio
import json
import logging
import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from itest_runner.connectivity import (
    CheckResult,
    check_executable_paths,
    check_license_server,
    check_settings_database,
)
from itest_runner.errors import ConfigurationError
from itest_runner.models.config import GlobalConfig, JobConfig
from itest_runner.models.context import BuildContext
from itest_runner.models.result import RunResult
from itest_runner.orchestrator import ITestOrchestrator
from itest_runner.reports import DEFAULT_REPORT_NAME, HtmlReportPublisher
from itest_runner.settings import GlobalConfigStore
from itest_runner.shells.loading import BATCH_SHELL_KEY, POSIX_SHELL_KEY, load_shell

STATUS_SYMBOLS = {
    "success": "✅",
    "tool-error": "❗",
    "test-failure": "❌",
    "missing-log": "❓",
    "report-error": "📄",
}

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION_ERROR = 2


def log_run_summary(log: logging.Logger, result: RunResult) -> None:
    """Log a formatted summary of the run."""
    log.info("=" * 80)
    log.info("iTest Run Summary:")
    log.info("=" * 80)

    symbol = STATUS_SYMBOLS.get(result.status, "?")
    log.info("%s %s", symbol, result.status)
    if result.step:
        log.info("  Step: %s", result.step)
    if result.message:
        log.info("  Message: %s", result.message)
    for test_case in result.test_cases:
        log.info("  Test case: %s", test_case)
    for report in result.reports:
        log.info("  Report: %s (%s)", report.report_name, report.report_files)


def format_output(result: RunResult) -> dict[str, Any]:
    """Format the run result for JSON output."""
    return {
        "status": result.status,
        "succeeded": result.succeeded,
        "step": result.step,
        "message": result.message,
        "test_cases": list(result.test_cases),
        "reports": [
            {
                "name": report.report_name,
                "dir": report.report_dir,
                "files": report.report_files,
            }
            for report in result.reports
        ],
    }


def parse_assignments(assignments: Sequence[str]) -> Mapping[str, str]:
    """Parse ``key=value`` arguments."""
    changes: dict[str, str] = {}
    for assignment in assignments:
        key, separator, value = assignment.partition("=")
        if not separator or not key.strip():
            raise ConfigurationError(f"Expected key=value, got '{assignment}'")
        changes[key.strip()] = value
    return changes


def build_context(
    workspace_root: str,
    run_id: str,
    log_file: Path,
    archive_dir: Path | None,
    *,
    is_unix: bool,
) -> BuildContext:
    """Build context for a run invoked from the command line."""
    return BuildContext(
        workspace=workspace_root,
        run_id=run_id,
        log_path=log_file,
        is_unix=is_unix,
        build_archive_dir=archive_dir / "builds" / run_id if archive_dir else None,
        project_archive_dir=archive_dir,
    )


async def run(
    settings: GlobalConfig,
    job_config_json: str,
    context: BuildContext,
    shell_key: str,
    report_name: str = DEFAULT_REPORT_NAME,
) -> int:
    """Run the build step and return exit code."""
    log = logging.getLogger("itest_runner")

    try:
        job = JobConfig.model_validate(json.loads(job_config_json))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigurationError(f"Invalid job configuration: {exc}") from exc

    log.info("Loading shell: %s", shell_key)
    orchestrator = ITestOrchestrator(
        settings=settings,
        shell=load_shell(shell_key),
        publisher=HtmlReportPublisher(),
        report_name=report_name,
    )
    result = await orchestrator.run(job, context)

    log_run_summary(log, result)
    print(json.dumps(format_output(result), indent=2))

    return EXIT_SUCCESS if result.succeeded else EXIT_FAILURE


async def check(kind: str, settings: GlobalConfig) -> int:
    """Run a configuration check and return exit code."""
    log = logging.getLogger("itest_runner")

    result: CheckResult
    if kind == "paths":
        result = check_executable_paths(settings.cli_path, settings.rt_path)
    elif kind == "license-server":
        result = await check_license_server(
            settings.license_server_host, settings.license_server_port
        )
    else:
        result = await check_settings_database(settings)

    log.info("Check %s: %s", kind, result.message)
    payload = {"check": kind, "status": result.status, "message": result.message}
    print(json.dumps(payload))
    return EXIT_SUCCESS if result.ok else EXIT_FAILURE


def configure(store: GlobalConfigStore, assignments: Sequence[str]) -> int:
    """Save changed global settings and return exit code."""
    config = store.update(parse_assignments(assignments))
    data = config.model_dump(mode="json")
    print(json.dumps(data, indent=2))
    return EXIT_SUCCESS


def build_parser() -> argparse.ArgumentParser:
    """Argument parser with the run, configure and check commands."""
    parser = argparse.ArgumentParser(
        description="Run Spirent iTest test cases as a CI build step"
    )
    parser.add_argument(
        "--global-config",
        type=Path,
        required=True,
        help="Path to the global settings YAML file",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    run_parser = commands.add_parser("run", help="Export projects and run test cases")
    run_parser.add_argument(
        "--job-config",
        required=True,
        help="JSON configuration of the job",
    )
    run_parser.add_argument(
        "--workspace-root",
        required=True,
        help="Workspace directory of the build",
    )
    run_parser.add_argument(
        "--run-id",
        required=True,
        help="Unique identifier of the build",
    )
    run_parser.add_argument(
        "--log-file",
        type=Path,
        required=True,
        help="Build log that command output is appended to",
    )
    run_parser.add_argument(
        "--archive-dir",
        type=Path,
        default=None,
        help="Directory published reports are archived into",
    )
    run_parser.add_argument(
        "--shell",
        default=BATCH_SHELL_KEY if os.name == "nt" else POSIX_SHELL_KEY,
        help="Registered shell used to run commands (default: based on the OS)",
    )
    run_parser.add_argument(
        "--report-name",
        default=DEFAULT_REPORT_NAME,
        help="Display name prefix of published reports",
    )

    configure_parser = commands.add_parser("configure", help="Save global settings")
    configure_parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Setting to change (repeatable)",
    )

    check_parser = commands.add_parser("check", help="Check global settings")
    check_parser.add_argument(
        "kind",
        choices=["paths", "license-server", "database"],
        help="What to check",
    )

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    log = logging.getLogger("itest_runner")

    store = GlobalConfigStore(path=args.global_config)

    try:
        if args.command == "configure":
            exit_code = configure(store, args.assignments)
        elif args.command == "check":
            exit_code = asyncio.run(check(args.kind, store.load()))
        else:
            context = build_context(
                args.workspace_root,
                args.run_id,
                args.log_file,
                args.archive_dir,
                is_unix=args.shell != BATCH_SHELL_KEY,
            )
            exit_code = asyncio.run(
                run(
                    settings=store.load(),
                    job_config_json=args.job_config,
                    context=context,
                    shell_key=args.shell,
                    report_name=args.report_name,
                )
            )
    except ConfigurationError as exc:
        log.error("Configuration error: %s", exc)
        exit_code = EXIT_CONFIGURATION_ERROR

    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
