"""Console tables for scan results."""

from typing import Any

from ..constants import (
    DEFAULT_MAX_COLUMN_WIDTHS,
    FALLBACK_MAX_COLUMN_WIDTH,
    SECRET_TABLE_COLUMN_WIDTHS,
    SEVERITY_EMOJIS,
    SEVERITY_ORDER,
)
from .aggregator import ReportBundle
from .transform import raw_secret_identity

SEPARATOR = "=" * 50


def truncate_text(text: Any, column_width: int) -> str:
    """Fit ``text`` into a column, leaving one space of padding each side."""
    value = "" if text is None else str(text)
    available = column_width - 2
    if len(value) <= available:
        return value
    return value[: max(available - 3, 0)] + "..."


def format_table(
    headers: list[str],
    rows: list[list[str]],
    max_widths: dict[int, int] | None = None,
) -> str:
    """Render a box-drawn table. Returns "" when there are no rows."""
    if not rows:
        return ""

    limits = max_widths or DEFAULT_MAX_COLUMN_WIDTHS
    widths = []
    for idx, header in enumerate(headers):
        longest = max(len(str(row[idx] or "")) for row in rows)
        natural = max(len(header), longest) + 2
        widths.append(min(natural, limits.get(idx, FALLBACK_MAX_COLUMN_WIDTH)))

    def border(left: str, middle: str, right: str) -> str:
        return left + middle.join("─" * w for w in widths) + right

    def line(cells: list[str]) -> str:
        rendered = (
            " " + truncate_text(cell, widths[idx]).ljust(widths[idx] - 1)
            for idx, cell in enumerate(cells)
        )
        return "│" + "│".join(rendered) + "│"

    lines = [border("┌", "┬", "┐"), line(headers), border("├", "┼", "┤")]
    lines.extend(line(row) for row in rows)
    lines.append(border("└", "┴", "┘"))
    return "\n".join(lines)


def _severity_cell(severity: str) -> str:
    return f"{SEVERITY_EMOJIS[severity]} {severity}"


def _bucketed(items: list[dict[str, Any]]) -> list[tuple[str, dict[str, Any]]]:
    """Order items CRITICAL..LOW, dropping any other severity."""
    ordered = []
    for severity in SEVERITY_ORDER:
        for item in items:
            if str(item.get("Severity") or "").upper() == severity:
                ordered.append((severity, item))
    return ordered


def _results(report: Any) -> list[dict[str, Any]]:
    if not isinstance(report, dict) or not isinstance(report.get("Results"), list):
        return []
    return [r for r in report["Results"] if isinstance(r, dict)]


def _collect(report: Any, category: str) -> list[tuple[dict[str, Any], dict[str, Any]]]:
    """(result, item) pairs for every entry of ``Results[].<category>``."""
    pairs = []
    for result in _results(report):
        items = result.get(category)
        if isinstance(items, list):
            pairs.extend((result, item) for item in items if isinstance(item, dict))
    return pairs


def count_vulnerabilities(trivy_vuln: Any) -> int:
    return len(_collect(trivy_vuln, "Vulnerabilities"))


def count_misconfigurations(trivy_config: Any) -> int:
    return len(_collect(trivy_config, "Misconfigurations"))


def unique_secrets(gitleaks: Any) -> list[dict[str, Any]]:
    if not isinstance(gitleaks, list):
        return []
    seen = set()
    unique = []
    for secret in gitleaks:
        if not isinstance(secret, dict):
            continue
        key = raw_secret_identity(secret)
        if key not in seen:
            seen.add(key)
            unique.append(secret)
    return unique


def format_vulnerability_table(trivy_vuln: Any) -> str:
    vulnerabilities = [vuln for _, vuln in _collect(trivy_vuln, "Vulnerabilities")]
    rows = [
        [
            vuln.get("PkgName") or "Unknown",
            vuln.get("VulnerabilityID") or "N/A",
            _severity_cell(severity),
            vuln.get("FixedVersion") or "N/A",
        ]
        for severity, vuln in _bucketed(vulnerabilities)
    ]
    return format_table(["Package", "Vulnerability", "Severity", "Fixed Version"], rows)


def format_config_table(trivy_config: Any) -> str:
    misconfigurations = [
        {
            "File": result.get("Target") or "Unknown",
            "Issue": misc.get("Title") or misc.get("ID") or "N/A",
            "Severity": misc.get("Severity") or "UNKNOWN",
        }
        for result, misc in _collect(trivy_config, "Misconfigurations")
    ]
    # trivy config reports carry no line numbers at this level
    rows = [
        [misc["File"], misc["Issue"], _severity_cell(severity), "N/A"]
        for severity, misc in _bucketed(misconfigurations)
    ]
    return format_table(["File", "Issue", "Severity", "Line"], rows)


def format_secret_table(gitleaks: Any) -> str:
    rows = [
        [
            str(secret.get("File") or "Unknown").lstrip("/"),
            str(secret.get("StartLine") or "N/A"),
            secret.get("Match") or "N/A",
        ]
        for secret in unique_secrets(gitleaks)
    ]
    return format_table(["File", "Line", "Matched Secret"], rows, SECRET_TABLE_COLUMN_WIDTHS)


def _print_table(title: str, table: str) -> None:
    if not table:
        return
    print(f"\n{title}:\n")
    print(table)
    print("")


def display_scan_results(reports: ReportBundle) -> None:
    """Print the consolidated report for every scan that produced output."""
    print("\n" + SEPARATOR)
    print("CONSOLIDATED SCAN REPORT")
    print(SEPARATOR)

    if reports.trivy_vuln is not None:
        print("\nVULNERABILITY SCAN RESULTS")
        print(f"   Total Vulnerabilities: {count_vulnerabilities(reports.trivy_vuln)}")
        _print_table("Vulnerability Details", format_vulnerability_table(reports.trivy_vuln))

    print("\n" + SEPARATOR)

    if reports.trivy_config is not None:
        print("\nCONFIG SCANNER RESULTS")
        print(f"   Total Misconfigurations: {count_misconfigurations(reports.trivy_config)}")
        _print_table("Misconfiguration Details", format_config_table(reports.trivy_config))

    print("\n" + SEPARATOR)

    if isinstance(reports.gitleaks, list):
        print("\nSECRET SCANNER RESULTS")
        print(f"   Total Secrets Detected: {len(unique_secrets(reports.gitleaks))}")
        _print_table("Secret Details", format_secret_table(reports.gitleaks))

    print("\n" + SEPARATOR)
