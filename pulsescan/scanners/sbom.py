"""SBOM generation with cdxgen."""

import logging
from pathlib import Path

from ..config import RunnerOptions
from ..core.command import CommandResult, CommandRunner
from .base import ToolScanner

logger = logging.getLogger(__name__)


class SbomGenerator(ToolScanner):
    """Writes a CycloneDX SBOM for the project. Never reports findings."""

    tool_name = "cdxgen"
    description = "SBOM generation with cdxgen"

    def __init__(
        self,
        project_dir: str | Path,
        output_file: str | Path,
        options: RunnerOptions | None = None,
        command_runner: CommandRunner | None = None,
    ) -> None:
        super().__init__(output_file, options, command_runner)
        self.project_dir = Path(project_dir)

    @property
    def working_dir(self) -> Path:
        return self.project_dir

    def build_command(self) -> list[str]:
        return [
            "cdxgen",
            "-r", str(self.project_dir),
            "-o", str(self.output_file),
            "--no-banner",
        ]

    def interpret(self, result: CommandResult) -> bool:
        if not result.succeeded:
            raise self._fail(result)
        logger.info("\nSBOM scan completed successfully!")
        return False

    def generate(self) -> Path:
        """Run cdxgen and return the SBOM path."""
        self.run()
        return self.output_file
