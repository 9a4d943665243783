"""
Scan pipeline: SBOM generation, the three scanners, reporting and upload.

Each scanner only says whether it found something; the fail-on flags in
the configuration decide whether that ends the run.
"""

import json
import logging
from pathlib import Path

from .clients.upload_client import UploadClient, UploadResponse
from .config import PulseScanConfig
from .constants import (
    GITLEAKS_REPORT_FILE,
    SBOM_REPORT_FILE,
    TRIVY_CONFIG_REPORT_FILE,
    TRIVY_VULN_REPORT_FILE,
)
from .core.command import CommandRunner
from .core.exceptions import NoReportsError, PulseScanError, ScanExecutionError
from .logging_config import mask_value
from .reports.aggregator import ReportBundle, parse_report_files
from .reports.console import display_scan_results
from .reports.models import CombinedScanRequest
from .reports.transform import transform_config, transform_secrets
from .scanners.base import ToolScanner
from .scanners.gitleaks import GitleaksScanner
from .scanners.sbom import SbomGenerator
from .scanners.trivy import TrivyConfigScanner, TrivyVulnScanner

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def build_combined_request(reports: ReportBundle, config: PulseScanConfig) -> CombinedScanRequest:
    return CombinedScanRequest(
        config_scan_response_dto=transform_config(reports.trivy_config, config.workspace),
        scanner_secret_response=transform_secrets(reports.gitleaks),
        repo_name=config.metadata.repo_name,
        branch_name=config.metadata.branch_name,
    )


def create_upload_client(config: PulseScanConfig, headers: dict[str, str] | None = None) -> UploadClient:
    return UploadClient(
        endpoint=config.api_endpoint,
        api_key=config.api_key,
        secret_key=config.secret_key,
        project_id=config.project_id,
        headers=headers,
        timeout=config.upload_timeout,
        retries=config.upload_retries,
    )


def process_and_send_reports(
    output_dir: str | Path,
    config: PulseScanConfig,
    client: UploadClient | None = None,
) -> UploadResponse:
    """Aggregate the reports in ``output_dir``, print them and upload them.

    Raises:
        NoReportsError: No report could be read, nothing is sent
        ClientError: The upload failed
    """
    reports = parse_report_files(output_dir)
    if not reports.has_reports():
        raise NoReportsError(f"No valid reports found to send in {output_dir}")

    display_scan_results(reports)

    request = build_combined_request(reports, config)
    misconfig_count = (
        request.config_scan_response_dto.total_misconfigurations
        if request.config_scan_response_dto
        else 0
    )
    logger.info(
        f"\nScan Summary: {misconfig_count} misconfiguration(s), "
        f"{len(request.scanner_secret_response)} secret(s)"
    )
    _log_request_details(request)

    sbom_path = Path(output_dir) / SBOM_REPORT_FILE
    if client is not None:
        return client.upload(request, sbom_path, config.metadata)

    with create_upload_client(config) as owned_client:
        return owned_client.upload(request, sbom_path, config.metadata)


def _log_request_details(request: CombinedScanRequest) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug("\nCombinedScanRequest Structure:")
    dto = request.config_scan_response_dto
    if dto:
        logger.debug(f"  - configScanResponseDto: {dto.artifact_name} ({dto.artifact_type})")
        logger.debug(f"      Total Misconfigurations: {dto.total_misconfigurations}")
        for result in dto.results:
            logger.debug(f"      {result.target} ({len(result.misconfigurations)} issues)")
            for misconfig in result.misconfigurations:
                logger.debug(f"        {misconfig.id} [{misconfig.severity}] {misconfig.title}")

    logger.debug(f"  - scannerSecretResponse count: {len(request.scanner_secret_response)}")
    for finding in request.scanner_secret_response:
        logger.debug(
            f"        {finding.rule_id} in {finding.file} "
            f"(line {finding.start_line}:{finding.start_column} - {finding.end_line}:{finding.end_column}): "
            f"{mask_value(finding.secret)}"
        )
    logger.debug(f"  - repoName: {request.repo_name or 'NOT SET'}")
    logger.debug(f"  - branchName: {request.branch_name or 'NOT SET'}")

    wire = request.to_wire()
    for entry in wire["scannerSecretResponse"]:
        entry["Secret"] = mask_value(entry["Secret"])
        entry["Match"] = mask_value(entry["Match"])
    logger.debug(f"Full CombinedScanRequest JSON:\n{json.dumps(wire, indent=2)}")


class ScanPipeline:
    """Runs a full scan for one workspace and returns the process exit code."""

    def __init__(
        self,
        config: PulseScanConfig,
        command_runner: CommandRunner | None = None,
        client: UploadClient | None = None,
    ) -> None:
        self.config = config
        self.command_runner = command_runner or CommandRunner()
        self.client = client
        self.project_dir = Path(config.workspace)
        self.output_dir = config.output_dir

    def run(self) -> int:
        logger.info("Starting SBOM scan of project source code")
        self._log_configuration()
        logger.info(f"Project directory: {self.project_dir}")

        if not self.output_dir.exists():
            self.output_dir.mkdir(parents=True)
            logger.info(f"\nCreated output directory: {self.output_dir}")

        sbom_file = self.output_dir / SBOM_REPORT_FILE
        try:
            SbomGenerator(
                self.project_dir,
                sbom_file,
                options=self.config.runner_options(fail_on_findings=False),
                command_runner=self.command_runner,
            ).generate()
        except ScanExecutionError as e:
            logger.error(f"Error during SBOM scan: {e}")
            return EXIT_FAILURE

        steps = [
            (
                "Trivy config scan",
                "misconfigurations",
                "fail_on_misconfiguration",
                TrivyConfigScanner(
                    self.project_dir,
                    self.output_dir / TRIVY_CONFIG_REPORT_FILE,
                    project_dir=self.project_dir,
                    options=self.config.runner_options(self.config.fail_on_misconfiguration),
                    command_runner=self.command_runner,
                ),
            ),
            (
                "Trivy vulnerability scan",
                "vulnerabilities",
                "fail_on_vulnerability",
                TrivyVulnScanner(
                    sbom_file,
                    self.output_dir / TRIVY_VULN_REPORT_FILE,
                    project_dir=self.project_dir,
                    options=self.config.runner_options(self.config.fail_on_vulnerability),
                    command_runner=self.command_runner,
                ),
            ),
            (
                "Gitleaks scan",
                "secrets",
                "fail_on_secret",
                GitleaksScanner(
                    self.project_dir,
                    self.output_dir / GITLEAKS_REPORT_FILE,
                    rules_path=self.config.gitleaks_config,
                    options=self.config.runner_options(self.config.fail_on_secret),
                    command_runner=self.command_runner,
                ),
            ),
        ]

        for label, finding_name, flag_name, scanner in steps:
            if self._should_abort(label, finding_name, flag_name, scanner):
                return EXIT_FAILURE

        try:
            logger.info(f"API URL: {self.config.api_endpoint}")
            logger.info("\nSending reports to API...")
            process_and_send_reports(self.output_dir, self.config, client=self.client)
        except PulseScanError as e:
            logger.error(f"\nFailed to send reports to API: {e}")
            return EXIT_FAILURE

        logger.info("All scans and API submission completed successfully!")
        return EXIT_OK

    def _should_abort(self, label: str, finding_name: str, flag_name: str, scanner: ToolScanner) -> bool:
        fail_on = getattr(self.config, flag_name)
        try:
            found = scanner.run()
        except ScanExecutionError as e:
            logger.error(
                f"{label} failed: {e}",
                extra={"event": "scan_failed", "scanner": scanner.tool_name, "exit_code": e.exit_code},
            )
            return fail_on

        if found and fail_on:
            logger.error(f"{label} found {finding_name} and {flag_name} is enabled")
            return True
        return False

    def _log_configuration(self) -> None:
        if not self.config.debug:
            return
        logger.debug("\nDebug mode enabled")
        logger.debug(
            "Configuration:\n"
            f"  - debug: {self.config.debug}\n"
            f"  - fail_on_misconfiguration: {self.config.fail_on_misconfiguration}\n"
            f"  - fail_on_vulnerability: {self.config.fail_on_vulnerability}\n"
            f"  - fail_on_secret: {self.config.fail_on_secret}"
        )
