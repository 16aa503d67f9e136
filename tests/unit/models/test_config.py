"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from itest_runner.models.config import GlobalConfig, JobConfig


def test_job_config_defaults_to_empty() -> None:
    """Every option is off unless configured."""
    job = JobConfig()

    assert job.testcases == ""
    assert not job.test_report_required


def test_job_config_is_frozen() -> None:
    """Job configuration cannot change during a run."""
    job = JobConfig(testcases="project://s/1.xml")

    with pytest.raises(ValidationError):
        job.testcases = "other"  # type: ignore[misc]


def test_job_config_rejects_unknown_fields() -> None:
    """Misspelled options are not silently dropped."""
    with pytest.raises(ValidationError):
        JobConfig.model_validate({"testcase": "project://s/1.xml"})


@pytest.mark.parametrize(
    ("cli_path", "rt_path", "expected"),
    [
        ("", "", ("itestcli", "itestrt")),
        ("/opt/a/itestcli", "/opt/a/itestrt", ("/opt/a/itestcli", "/opt/a/itestrt")),
    ],
)
def test_executables_fall_back_to_path(
    cli_path: str, rt_path: str, expected: tuple[str, str]
) -> None:
    """Unset executable paths fall back to names looked up on PATH."""
    settings = GlobalConfig(cli_path=cli_path, rt_path=rt_path)

    assert (settings.cli_executable, settings.rt_executable) == expected


def test_global_config_coerces_ports() -> None:
    """Numeric ports are stored as text."""
    settings = GlobalConfig.model_validate(
        {"license_server_port": 27000, "db_port": 5432}
    )

    assert settings.license_server_port == "27000"
    assert settings.db_port == "5432"


def test_global_config_masks_password() -> None:
    """The password is not shown when the settings are printed."""
    settings = GlobalConfig.model_validate({"db_password": "s3cr3t"})

    assert "s3cr3t" not in str(settings)
    assert settings.db_password.get_secret_value() == "s3cr3t"
