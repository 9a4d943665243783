"""trivy runners for misconfigurations and SBOM vulnerabilities."""

import logging
from pathlib import Path

from ..config import RunnerOptions
from ..core.command import CommandResult, CommandRunner
from .base import ToolScanner, report_has_findings

logger = logging.getLogger(__name__)


class TrivyScanner(ToolScanner):
    """Any non-zero trivy exit is a failure; findings come from the report."""

    tool_name = "trivy"
    findings_key = ""

    def __init__(
        self,
        target: str | Path,
        output_file: str | Path,
        project_dir: str | Path | None = None,
        options: RunnerOptions | None = None,
        command_runner: CommandRunner | None = None,
    ) -> None:
        super().__init__(output_file, options, command_runner)
        self.target = Path(target)
        self.project_dir = Path(project_dir) if project_dir else None

    @property
    def working_dir(self) -> Path | None:
        return self.project_dir

    def interpret(self, result: CommandResult) -> bool:
        if not result.succeeded:
            raise self._fail(result)
        logger.info(f"\n{self.description} completed successfully!")

        report = self._read_report()
        return report_has_findings(report, self.findings_key)


class TrivyConfigScanner(TrivyScanner):
    description = "Trivy config scan"
    findings_key = "Misconfigurations"

    def build_command(self) -> list[str]:
        return [
            "trivy", "config",
            "--format", "json",
            "--output", str(self.output_file),
            str(self.target),
        ]


class TrivyVulnScanner(TrivyScanner):
    """Scans the SBOM produced by cdxgen rather than the source tree."""

    description = "Trivy vulnerability scan"
    findings_key = "Vulnerabilities"

    def build_command(self) -> list[str]:
        return [
            "trivy", "sbom",
            "--format", "json",
            "--output", str(self.output_file),
            str(self.target),
        ]
