"""Normalize raw trivy and gitleaks reports into the upload models.

Both transforms are total: any shape of input yields a result, fields that
are missing fall back to their defaults.
"""

import logging
from typing import Any

from .models import (
    ConfigScanResponseDto,
    ConfigScanResult,
    Misconfiguration,
    SecretFinding,
)

logger = logging.getLogger(__name__)


def transform_config(
    trivy_config: Any, default_artifact_name: str = ""
) -> ConfigScanResponseDto | None:
    """Flatten a ``trivy config`` report into a ConfigScanResponseDto.

    Targets without misconfigurations are left out. ``default_artifact_name``
    is used when the report does not name its artifact.
    """
    if not isinstance(trivy_config, dict):
        return None

    results: list[ConfigScanResult] = []
    total = 0

    for result in _results(trivy_config):
        misconfigurations = [
            _to_misconfiguration(misc)
            for misc in _list(result.get("Misconfigurations"))
            if isinstance(misc, dict)
        ]
        if not misconfigurations:
            continue

        total += len(misconfigurations)
        results.append(
            ConfigScanResult(
                target=_optional_text(result.get("Target")),
                result_class=_text(result.get("Class"), "config"),
                result_type=_text(result.get("Type"), "kubernetes"),
                misconfigurations=misconfigurations,
            )
        )

    return ConfigScanResponseDto(
        artifact_name=_text(trivy_config.get("ArtifactName"), default_artifact_name),
        artifact_type=_text(trivy_config.get("ArtifactType"), "filesystem"),
        results=results,
        total_misconfigurations=total,
    )


def transform_secrets(gitleaks_report: Any) -> list[SecretFinding]:
    """Map a gitleaks report to SecretFindings, dropping duplicates.

    The first finding seen for an identity is kept, so the output order
    follows the report.
    """
    if not isinstance(gitleaks_report, list):
        return []

    transformed = [
        _to_secret_finding(finding)
        for finding in gitleaks_report
        if isinstance(finding, dict)
    ]
    deduplicated = dedupe_secrets(transformed)

    logger.debug(
        f"Secret deduplication: {len(transformed)} entries -> {len(deduplicated)} unique entries"
    )
    return deduplicated


def dedupe_secrets(findings: list[SecretFinding]) -> list[SecretFinding]:
    seen: set[tuple[str, ...]] = set()
    unique = []
    for finding in findings:
        if finding.identity in seen:
            continue
        seen.add(finding.identity)
        unique.append(finding)
    return unique


def raw_secret_identity(finding: dict[str, Any]) -> tuple[str, ...]:
    """Identity key of an untransformed gitleaks finding."""
    return _to_secret_finding(finding).identity


def _to_misconfiguration(misc: dict[str, Any]) -> Misconfiguration:
    return Misconfiguration(
        id=_optional_text(misc.get("ID")),
        title=_optional_text(misc.get("Title")),
        description=_text(misc.get("Description")),
        message=_text(misc.get("Message")),
        severity=_text(misc.get("Severity"), "UNKNOWN"),
        primary_url=_text(misc.get("PrimaryURL")),
        query=_text(misc.get("Query")),
        resolution=_text(misc.get("Resolution")),
    )


def _to_secret_finding(finding: dict[str, Any]) -> SecretFinding:
    rule_id = _text(finding.get("RuleID")) or _text(finding.get("Rule"))
    match = _text(finding.get("Match"))
    return SecretFinding(
        rule_id=rule_id,
        description=_text(finding.get("Description"), f"Detect {rule_id or 'secret'}"),
        file=_text(finding.get("File")),
        match=match,
        secret=_text(finding.get("Secret")) or match,
        start_line=_text(finding.get("StartLine"), "0"),
        end_line=_text(finding.get("EndLine"), "0"),
        start_column=_text(finding.get("StartColumn"), "0"),
        end_column=_text(finding.get("EndColumn"), "0"),
    )


def _results(report: dict[str, Any]) -> list[dict[str, Any]]:
    return [result for result in _list(report.get("Results")) if isinstance(result, dict)]


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _text(value: Any, default: str = "") -> str:
    # Falsy values (None, "", 0) take the default
    if not value:
        return default
    return str(value)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)
