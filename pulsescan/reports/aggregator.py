"""Load the tool reports written during a run."""

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from ..constants import (
    GITLEAKS_REPORT_FILE,
    SBOM_REPORT_FILE,
    TRIVY_CONFIG_REPORT_FILE,
    TRIVY_VULN_REPORT_FILE,
)
from ..core.exceptions import MalformedReportError

logger = logging.getLogger(__name__)

REPORT_FILES = {
    "sbom": SBOM_REPORT_FILE,
    "trivy_config": TRIVY_CONFIG_REPORT_FILE,
    "trivy_vuln": TRIVY_VULN_REPORT_FILE,
    "gitleaks": GITLEAKS_REPORT_FILE,
}


@dataclass
class ReportBundle:
    """Parsed reports; a report that was missing or unreadable is None."""

    sbom: Any = None
    trivy_config: Any = None
    trivy_vuln: Any = None
    gitleaks: Any = None

    def has_reports(self) -> bool:
        return any(getattr(self, f.name) is not None for f in fields(self))


def load_json_report(path: Path) -> Any:
    """Parse one report file.

    Raises:
        FileNotFoundError: The file does not exist
        MalformedReportError: The file is not valid JSON
    """
    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedReportError(f"Invalid JSON in {path}: {e}", path=str(path)) from e


def parse_report_files(output_dir: str | Path) -> ReportBundle:
    """Read every known report from ``output_dir``. Never raises."""
    directory = Path(output_dir)
    logger.debug(f"Parsing report files from: {directory}")

    bundle = ReportBundle()
    for key, file_name in REPORT_FILES.items():
        path = directory / file_name
        try:
            setattr(bundle, key, load_json_report(path))
            logger.debug(f"Parsed {key} report: {path}")
        except FileNotFoundError:
            logger.debug(f"Report file not found: {path}")
        except (MalformedReportError, OSError) as e:
            logger.error(f"Error parsing {key} report ({path}): {e}")

    return bundle
