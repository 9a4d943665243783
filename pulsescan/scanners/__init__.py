"""Runners for the external SBOM, trivy and gitleaks tools."""

from .base import ToolScanner, report_has_findings
from .gitleaks import GitleaksScanner
from .sbom import SbomGenerator
from .trivy import TrivyConfigScanner, TrivyVulnScanner

__all__ = [
    "GitleaksScanner",
    "SbomGenerator",
    "ToolScanner",
    "TrivyConfigScanner",
    "TrivyVulnScanner",
    "report_has_findings",
]
