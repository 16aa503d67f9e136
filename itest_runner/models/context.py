"""Build host context handed to the orchestrator for one run."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, kw_only=True)
class BuildContext:
    """What the build host supplies for a single run.

    Attributes:
        workspace: Root directory of the job workspace on the build agent
        run_id: Unique identifier of this run
        log_path: Run log sink that command output is appended to
        is_unix: Whether commands run through a POSIX shell or a batch file
        build_archive_dir: Directory that belongs to this run only
        project_archive_dir: Directory shared by every run of the job

    """

    workspace: str
    run_id: str
    log_path: Path
    is_unix: bool = True
    build_archive_dir: Path | None = None
    project_archive_dir: Path | None = None
