"""Constants and configuration values for pulsescan.

This module centralizes report file names, wire constants and defaults
that are used across the codebase for easier maintenance.
"""

# =============================================================================
# Report Files
# =============================================================================

# Directory created under the workspace to hold every tool report
REPORT_DIR_NAME = "scan-report"

SBOM_REPORT_FILE = "cyclonedx.json"
TRIVY_CONFIG_REPORT_FILE = "trivy-config-report.json"
TRIVY_VULN_REPORT_FILE = "trivy-vuln-report.json"
GITLEAKS_REPORT_FILE = "gitleaks-report.json"


# =============================================================================
# Upload API
# =============================================================================

DEFAULT_API_ENDPOINT = "https://beta.neoTrak.io"
UPLOAD_PATH = "/open-pulse/project/upload-all"

# Default HTTP request timeout in seconds
DEFAULT_UPLOAD_TIMEOUT = 60.0

# Opt-in retry backoff: 1s, 2s, 4s ... never more than 10s between attempts
RETRY_BACKOFF_BASE_SECONDS = 1.0
RETRY_BACKOFF_MAX_SECONDS = 10.0

# Constant multipart fields
DISPLAY_NAME = "sbom"
UPLOAD_SOURCE = "jenkins"


# =============================================================================
# External Tools
# =============================================================================

# gitleaks exits with this code when it found secrets
GITLEAKS_LEAKS_EXIT_CODE = 1


# =============================================================================
# Console Tables
# =============================================================================

SEVERITY_ORDER = ("CRITICAL", "HIGH", "MEDIUM", "LOW")

SEVERITY_EMOJIS = {
    "CRITICAL": "\U0001f534",
    "HIGH": "\U0001f7e0",
    "MEDIUM": "\U0001f7e1",
    "LOW": "\U0001f7e2",
}

# Max width per column index (File/Package, Issue/Vulnerability, Severity, Line/Fixed Version)
DEFAULT_MAX_COLUMN_WIDTHS = {0: 50, 1: 40, 2: 15, 3: 20}
FALLBACK_MAX_COLUMN_WIDTH = 50

# File paths get the widest column in the secrets table
SECRET_TABLE_COLUMN_WIDTHS = {0: 70, 1: 8, 2: 30}
