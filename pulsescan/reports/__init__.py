"""Report loading, normalization and console output."""

from .aggregator import ReportBundle, parse_report_files
from .console import display_scan_results, format_table, truncate_text
from .models import (
    CombinedScanRequest,
    ConfigScanResponseDto,
    ConfigScanResult,
    Misconfiguration,
    SecretFinding,
)
from .transform import transform_config, transform_secrets

__all__ = [
    "CombinedScanRequest",
    "ConfigScanResponseDto",
    "ConfigScanResult",
    "Misconfiguration",
    "ReportBundle",
    "SecretFinding",
    "display_scan_results",
    "format_table",
    "parse_report_files",
    "transform_config",
    "transform_secrets",
    "truncate_text",
]
