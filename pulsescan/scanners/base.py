"""Common behaviour of the external tool runners."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ..config import RunnerOptions
from ..core.command import CommandResult, CommandRunner
from ..core.exceptions import MalformedReportError, ScanExecutionError
from ..reports.aggregator import load_json_report

logger = logging.getLogger(__name__)


def report_has_findings(report: Any, category: str) -> bool:
    """True when any ``Results[].<category>`` list in a trivy report is non-empty."""
    if not isinstance(report, dict):
        return False
    results = report.get("Results")
    if not isinstance(results, list):
        return False
    return any(
        isinstance(result, dict)
        and isinstance(result.get(category), list)
        and len(result[category]) > 0
        for result in results
    )


class ToolScanner(ABC):
    """Runs one external tool and reports whether it found anything.

    Subclasses build the command and interpret the result. Whether findings
    should fail the build is left to the caller.
    """

    tool_name: str = ""
    description: str = ""

    def __init__(
        self,
        output_file: str | Path,
        options: RunnerOptions | None = None,
        command_runner: CommandRunner | None = None,
    ) -> None:
        self.output_file = Path(output_file)
        self.options = options or RunnerOptions()
        self.command_runner = command_runner or CommandRunner()

    @abstractmethod
    def build_command(self) -> list[str]:
        """Return the argv for the tool."""

    @abstractmethod
    def interpret(self, result: CommandResult) -> bool:
        """Turn the tool's exit status and report into a findings flag."""

    @property
    def working_dir(self) -> Path | None:
        return None

    def run(self) -> bool:
        """Run the tool.

        Returns:
            True if findings were reported

        Raises:
            ScanExecutionError: The tool could not run or failed
        """
        logger.info(f"\nRunning {self.description}...")
        logger.info(f"Output file: {self.output_file}")
        logger.debug(f"Debug: fail_on_findings = {self.options.fail_on_findings}")

        command = self.build_command()
        result = self.command_runner.run(command, cwd=self.working_dir)
        found = self.interpret(result)

        if found:
            logger.warning(f"Warning: {self.tool_name} reported findings!")
            logger.debug(
                f"Debug: findings found, returning True. "
                f"fail_on_findings is {self.options.fail_on_findings}"
            )
        return found

    def _fail(self, result: CommandResult) -> ScanExecutionError:
        return ScanExecutionError(
            f"{self.tool_name} exited with code {result.returncode}",
            command=result.command,
            exit_code=result.returncode,
        )

    def _read_report(self) -> Any:
        """Load the tool's report; None when missing or unreadable."""
        try:
            return load_json_report(self.output_file)
        except FileNotFoundError:
            logger.debug(f"Report file not found: {self.output_file}")
            return None
        except (MalformedReportError, OSError) as e:
            logger.error(f"Could not read {self.tool_name} report: {e}")
            return None
