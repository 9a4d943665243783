"""Module for scanning a source tree for secrets using gitleaks."""

import logging
from pathlib import Path

from ..config import RunnerOptions
from ..constants import GITLEAKS_LEAKS_EXIT_CODE
from ..core.command import CommandResult, CommandRunner
from .base import ToolScanner

logger = logging.getLogger(__name__)


class GitleaksScanner(ToolScanner):
    """Scanner for detecting secrets using ``gitleaks dir``.

    gitleaks signals leaks through its exit code, so the report is not
    read here.
    """

    tool_name = "Gitleaks"
    description = "Gitleaks secret scan"

    def __init__(
        self,
        scan_dir: str | Path,
        output_file: str | Path,
        rules_path: str | Path | None = None,
        options: RunnerOptions | None = None,
        command_runner: CommandRunner | None = None,
    ) -> None:
        """Initialize the secrets scanner.

        Args:
            scan_dir: Directory to scan
            output_file: Where gitleaks writes its JSON report
            rules_path: Custom gitleaks config; gitleaks defaults apply when None
            options: Debug and fail policy flags
            command_runner: Executes the command, mainly replaced in tests
        """
        super().__init__(output_file, options, command_runner)
        self.scan_dir = Path(scan_dir)
        self.rules_path = Path(rules_path) if rules_path else None

    @property
    def working_dir(self) -> Path:
        return self.scan_dir

    def build_command(self) -> list[str]:
        command = [
            "gitleaks", "dir", str(self.scan_dir),
            f"--report-path={self.output_file}",
            "--report-format=json",
            "--no-banner",
        ]
        if self.rules_path:
            logger.info(f"Config/Rules path: {self.rules_path}")
            command.append(f"--config={self.rules_path}")
        return command

    def interpret(self, result: CommandResult) -> bool:
        if result.succeeded:
            logger.info("\nGitleaks secret scan completed successfully!")
            return False
        if result.returncode == GITLEAKS_LEAKS_EXIT_CODE:
            return True
        raise self._fail(result)
