"""Synchronous execution of external tools."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .exceptions import ScanExecutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    command: list[str]
    returncode: int

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs commands with the parent's stdin/stdout/stderr.

    Tool output goes straight to the CI log; only the exit code is
    captured. A binary that cannot be started raises ScanExecutionError.
    """

    def run(self, command: list[str], cwd: str | Path | None = None) -> CommandResult:
        logger.debug(f"Executing: {' '.join(command)}")
        try:
            completed = subprocess.run(command, cwd=cwd, check=False)
        except OSError as e:
            raise ScanExecutionError(
                f"Failed to start {command[0]}: {e}", command=command
            ) from e

        return CommandResult(command=list(command), returncode=completed.returncode)
