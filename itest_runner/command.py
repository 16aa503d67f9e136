"""Assemble iTestCLI and iTestRT command lines from job and global settings."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace

from itest_runner.models.config import GlobalConfig, JobConfig
from itest_runner.paths import report_directory_name, resolve_path, split_list

MASK = "****"
RESOURCES_PROJECT = "resources"
REPORT_FILE_PATTERN = "{tcfilename}.html"


@dataclass(frozen=True)
class CommandOption:
    """A single ``--flag value`` pair."""

    flag: str
    value: str
    secret: bool = False

    def render(self, *, masked: bool = False) -> str:
        """Serialise the option, optionally hiding secret values."""
        value = MASK if masked and self.secret else self.value
        return f"{self.flag} {value}"


@dataclass(frozen=True, kw_only=True)
class CommandLine:
    """Executable followed by options in the order they were added.

    Options are never reordered or deduplicated.
    """

    executable: str
    options: Sequence[CommandOption] = ()

    def with_option(
        self, flag: str, value: str, *, secret: bool = False
    ) -> "CommandLine":
        """Return a copy with one option appended."""
        return self.with_options([CommandOption(flag, value, secret)])

    def with_options(self, options: Iterable[CommandOption]) -> "CommandLine":
        """Return a copy with the options appended in order."""
        return replace(self, options=(*self.options, *options))

    @property
    def flags(self) -> Sequence[str]:
        """Flags in emission order."""
        return [option.flag for option in self.options]

    def render(self) -> str:
        """Serialise to the single string handed to the shell."""
        return " ".join(
            [self.executable, *(option.render() for option in self.options)]
        )

    def masked(self) -> str:
        """Serialise with secret values hidden, for logging."""
        return " ".join(
            [self.executable, *(option.render(masked=True) for option in self.options)]
        )


def _options(flag: str, value: str, *, secret: bool = False) -> list[CommandOption]:
    """Option list for ``flag``, empty when there is no value."""
    return [CommandOption(flag, value, secret)] if value else []


def license_server_address(settings: GlobalConfig) -> str:
    """Return ``host[:port]`` of the license server, or "" without a host."""
    if not settings.license_server_host:
        return ""
    if settings.license_server_port:
        return f"{settings.license_server_host}:{settings.license_server_port}"
    return settings.license_server_host


def build_report_target(workspace_uri: str, run_id: str) -> str:
    """Report destination pattern passed to ``--report``."""
    return f"{workspace_uri}/{report_directory_name(run_id)}/{REPORT_FILE_PATTERN}"


def build_export_command(
    executable: str, workspace_path: str, projects: str
) -> CommandLine:
    """Build the iTestCLI command exporting projects into iTAR files.

    ``--exportProject`` accepts several projects separated by commas but not
    spaces, so all whitespace is removed.
    """
    command = CommandLine(executable=executable).with_options(
        [
            *_options("--workspace", workspace_path),
            *_options("--exportPath", workspace_path),
        ]
    )
    return command.with_options(
        _options("--exportProject", ",".join(split_list(projects)))
    )


def build_execute_command(
    job: JobConfig,
    settings: GlobalConfig,
    *,
    workspace: str,
    test_cases: Sequence[str],
    report_target: str | None = None,
    env: Mapping[str, str] | None = None,
) -> CommandLine:
    """Build the iTestRT command running the selected test cases.

    Args:
        job: Job configuration
        settings: Global configuration
        workspace: Workspace directory of the run
        test_cases: Already resolved test case URIs, in order
        report_target: Value for ``--report``, or None when no report is wanted
        env: Environment used to expand ``$NAME`` references in paths

    Returns:
        The command line; options appear in a fixed order and any option whose
        source field is empty is left out.

    """
    itar_path = resolve_path(job.workspace, workspace, env)

    command = CommandLine(executable=settings.rt_executable).with_options(
        [
            *_options("--licenseServer", license_server_address(settings)),
            *_options("--itar", itar_path),
        ]
    )

    if job.testbed:
        command = command.with_option(
            "--testbed", "file:/" + resolve_path(job.testbed, workspace, env)
        )

    command = command.with_options(
        CommandOption("--param", param) for param in split_list(job.params)
    )

    if job.param_file:
        command = command.with_option(
            "--paramfile", "file:/" + resolve_path(job.param_file, workspace, env)
        )

    command = command.with_options(
        CommandOption("--test", test_case) for test_case in test_cases
    )

    if report_target:
        command = command.with_option("--report", report_target)

    return command.with_options(database_options(job, settings))


def database_options(job: JobConfig, settings: GlobalConfig) -> Sequence[CommandOption]:
    """Options that store results in the report database.

    Nothing is emitted without a database user. A database URI replaces the
    catalog, type, address and port options.
    """
    if not settings.db_username:
        return []

    options = [
        *_options("--trdb.user", settings.db_username),
        *_options(
            "--trdb.password", settings.db_password.get_secret_value(), secret=True
        ),
        *_options("--tag", job.db_custom_tag),
        *_options("--host", settings.license_server_host),
    ]

    if settings.db_uri:
        return [*options, CommandOption("--uri", settings.db_uri)]

    return [
        *options,
        *_options("--catalog", settings.db_name),
        *_options("--dbtype", settings.db_type),
        *_options("--ipaddr", settings.db_host),
        *_options("--trdb.port", settings.db_port),
    ]
