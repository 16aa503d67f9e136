"""Abstract base class for the shells that run iTest command lines."""

import asyncio
import logging
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from itest_runner.errors import ExecutionError
from itest_runner.models.context import BuildContext

log = logging.getLogger(__name__)


def normalize_separators(command: str) -> str:
    """Use forward slashes for every path separator in a command line."""
    return command.replace("\\", "/")


@dataclass(frozen=True, kw_only=True)
class CommandShell(ABC):
    """Runs a command line as a script through the host's shell.

    Subclasses only describe the script: its file extension, its contents and
    the interpreter invocation. Running it, capturing combined stdout/stderr
    and appending the output to the run log is shared.
    """

    name: str

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Extension of the script file, including the dot."""

    @abstractmethod
    def script_contents(self, command: str) -> str:
        """Text of the script that runs ``command``."""

    @abstractmethod
    def build_command_line(self, script: Path) -> Sequence[str]:
        """Interpreter invocation running the script file."""

    async def run(self, command: str, context: BuildContext) -> str:
        """Run a command line and return its captured output.

        Args:
            command: Complete command line
            context: Build context providing the workspace and run log

        Returns:
            Combined stdout and stderr of the command

        Raises:
            ExecutionError: If the command could not start, the run log could
                not be written, or the command was killed by a signal

        """
        command = normalize_separators(command)

        try:
            with tempfile.TemporaryDirectory(prefix="itest-") as script_dir:
                script = Path(script_dir) / f"script{self.file_extension}"
                script.write_text(self.script_contents(command), encoding="utf-8")

                with context.log_path.open("ab") as log_sink:
                    output, returncode = await self._spawn(script, context, log_sink)
        except OSError as exc:
            raise ExecutionError(f"Cannot run {self.name} script: {exc}") from exc

        if returncode < 0:
            raise ExecutionError(f"Command interrupted by signal {-returncode}")

        log.info("%s script exited with code %d", self.name, returncode)
        return output

    async def _spawn(
        self, script: Path, context: BuildContext, log_sink: IO[bytes]
    ) -> tuple[str, int]:
        """Start the interpreter and copy its output into the log sink."""
        process = await asyncio.create_subprocess_exec(
            *self.build_command_line(script),
            cwd=context.workspace,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        assert process.stdout is not None

        captured = bytearray()
        try:
            async for line in process.stdout:
                captured.extend(line)
                log_sink.write(line)
                log_sink.flush()
            await process.wait()
        finally:
            if process.returncode is None:
                process.kill()
                await process.wait()

        return captured.decode("utf-8", errors="replace"), process.returncode
