"""Canonical upload models.

Field aliases are the names the upload API expects; serialize with
``model_dump(by_alias=True)``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Misconfiguration(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, alias="ID")
    title: str | None = Field(default=None, alias="Title")
    description: str = Field(default="", alias="Description")
    message: str = Field(default="", alias="Message")
    severity: str = Field(default="UNKNOWN", alias="Severity")
    primary_url: str = Field(default="", alias="PrimaryURL")
    query: str = Field(default="", alias="Query")
    resolution: str = Field(default="", alias="Resolution")


class ConfigScanResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target: str | None = Field(default=None, alias="Target")
    result_class: str = Field(default="config", alias="Class")
    result_type: str = Field(default="kubernetes", alias="Type")
    misconfigurations: list[Misconfiguration] = Field(
        default_factory=list, alias="Misconfigurations"
    )


class ConfigScanResponseDto(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    artifact_name: str = Field(alias="ArtifactName")
    artifact_type: str = Field(default="filesystem", alias="ArtifactType")
    results: list[ConfigScanResult] = Field(default_factory=list, alias="Results")
    total_misconfigurations: int = Field(default=0, alias="TotalMisconfigurations")


class SecretFinding(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rule_id: str = Field(default="", alias="RuleID")
    description: str = Field(default="", alias="Description")
    file: str = Field(default="", alias="File")
    match: str = Field(default="", alias="Match")
    secret: str = Field(default="", alias="Secret")
    start_line: str = Field(default="0", alias="StartLine")
    end_line: str = Field(default="0", alias="EndLine")
    start_column: str = Field(default="0", alias="StartColumn")
    end_column: str = Field(default="0", alias="EndColumn")

    @property
    def identity(self) -> tuple[str, ...]:
        """Findings with the same identity are duplicates."""
        return (
            self.file,
            self.secret or self.match,
            self.start_line,
            self.end_line,
            self.start_column,
            self.end_column,
        )


class CombinedScanRequest(BaseModel):
    """The JSON document sent in the ``combinedScanRequest`` form field."""

    model_config = ConfigDict(populate_by_name=True)

    config_scan_response_dto: ConfigScanResponseDto | None = Field(
        default=None, alias="configScanResponseDto"
    )
    scanner_secret_response: list[SecretFinding] = Field(
        default_factory=list, alias="scannerSecretResponse"
    )
    repo_name: str | None = Field(default=None, alias="repoName")
    branch_name: str | None = Field(default=None, alias="branchName")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
