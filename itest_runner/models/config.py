"""Models for per-job and global build step configuration."""

from pydantic import ConfigDict, Field, SecretStr

from itest_runner.models.base import Model

DEFAULT_CLI_EXECUTABLE = "itestcli"
DEFAULT_RT_EXECUTABLE = "itestrt"


class JobConfig(Model):
    """Options configured on a single job.

    Every string field may be empty; an empty field means the option was not
    requested.
    """

    workspace: str = Field(default="", description="iTest workspace path")
    projects: str = Field(default="", description="Comma-separated projects to export")
    testcases: str = Field(default="", description="Comma-separated test case URIs")
    testbed: str = Field(default="", description="Testbed file reference")
    params: str = Field(default="", description="Comma-separated key=value parameters")
    param_file: str = Field(default="", description="Parameter file reference")
    test_report_required: bool = Field(
        default=False, description="Generate and publish HTML reports"
    )
    db_custom_tag: str = Field(default="", description="Tag for report database rows")


class GlobalConfig(Model):
    """Settings shared by every job, persisted by the configuration store.

    When ``db_uri`` is set it takes precedence over the discrete database
    host, name, type and port fields.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", coerce_numbers_to_str=True)

    cli_path: str = Field(default="", description="Path to the iTestCLI executable")
    rt_path: str = Field(default="", description="Path to the iTestRT executable")
    license_server_host: str = Field(
        default="", description="License server host or IP"
    )
    license_server_port: str = Field(default="", description="License server port")
    db_name: str = Field(default="", description="Report database name")
    db_type: str = Field(default="", description="Report database type")
    db_username: str = Field(default="", description="Report database user")
    db_password: SecretStr = Field(
        default=SecretStr(""), description="Report database password"
    )
    db_uri: str = Field(default="", description="Report database connection URI")
    db_host: str = Field(default="", description="Report database host or IP")
    db_port: str = Field(default="", description="Report database port")

    @property
    def cli_executable(self) -> str:
        """Configured CLI executable, falling back to the one on PATH."""
        return self.cli_path or DEFAULT_CLI_EXECUTABLE

    @property
    def rt_executable(self) -> str:
        """Configured runtime executable, falling back to the one on PATH."""
        return self.rt_path or DEFAULT_RT_EXECUTABLE
