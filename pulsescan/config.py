"""Configuration models for pulsescan.

All environment reads happen in ``PulseScanConfig.from_env``; every other
component receives the resulting value explicitly.
"""

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_API_ENDPOINT,
    DEFAULT_UPLOAD_TIMEOUT,
    REPORT_DIR_NAME,
)
from .core.exceptions import InvalidConfigError

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


class RunnerOptions(BaseModel):
    """Per-scanner options."""

    debug: bool = False
    fail_on_findings: bool = True


class UploadMetadata(BaseModel):
    """Optional CI identifiers sent alongside the reports."""

    organization_id: str | None = None
    job_id: str | None = None
    repo_name: str | None = None
    branch_name: str | None = None


class PulseScanConfig(BaseModel):
    """Complete run configuration."""

    workspace: str = Field(
        default_factory=os.getcwd, description="Project directory to scan"
    )
    api_endpoint: str = Field(
        default=DEFAULT_API_ENDPOINT, description="Base URL of the upload API"
    )
    api_key: str = Field(default="", description="Sent as the x-api-key header")
    secret_key: str = Field(default="", description="Sent as the x-secret-key header")
    project_id: str | None = Field(
        default=None, description="Appended to the upload path when set"
    )
    metadata: UploadMetadata = Field(default_factory=UploadMetadata)
    debug: bool = False
    fail_on_misconfiguration: bool = True
    fail_on_vulnerability: bool = True
    fail_on_secret: bool = True
    gitleaks_config: str | None = Field(
        default=None, description="Custom gitleaks rules file"
    )
    upload_timeout: float = Field(default=DEFAULT_UPLOAD_TIMEOUT, gt=0)
    upload_retries: int = Field(
        default=0, ge=0, description="Extra attempts after a timeout or network error"
    )
    log_file: str | None = None

    @property
    def output_dir(self) -> Path:
        return Path(self.workspace) / REPORT_DIR_NAME

    def runner_options(self, fail_on_findings: bool) -> RunnerOptions:
        return RunnerOptions(debug=self.debug, fail_on_findings=fail_on_findings)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PulseScanConfig":
        """Build the configuration from CI environment variables."""
        env = os.environ if environ is None else environ

        return cls(
            workspace=_first(env, "WORKSPACE") or os.getcwd(),
            api_endpoint=_first(env, "NT_API_ENDPOINT") or DEFAULT_API_ENDPOINT,
            api_key=env.get("NT_API_KEY", ""),
            secret_key=env.get("NT_SECRET_KEY", ""),
            project_id=_first(env, "PROJECT_ID"),
            metadata=UploadMetadata(
                organization_id=_first(env, "ORGANIZATION_ID"),
                job_id=_first(env, "BUILD_ID", "BUILD_NUMBER"),
                repo_name=_first(env, "JOB_NAME", "REPO_NAME"),
                branch_name=_first(env, "GIT_BRANCH", "BRANCH_NAME"),
            ),
            debug=_env_flag(env, "DEBUG_MODE", default=False),
            fail_on_misconfiguration=_env_flag(env, "FAIL_ON_MISCONFIGURATION", default=True),
            fail_on_vulnerability=_env_flag(env, "FAIL_ON_VULNERABILITY", default=True),
            fail_on_secret=_env_flag(env, "FAIL_ON_SECRET", default=True),
            gitleaks_config=_first(env, "GITLEAKS_CONFIG"),
            upload_timeout=_env_number(env, "UPLOAD_TIMEOUT", float, DEFAULT_UPLOAD_TIMEOUT),
            upload_retries=_env_number(env, "UPLOAD_RETRIES", int, 0),
            log_file=_first(env, "PULSESCAN_LOG_FILE"),
        )


def _first(env: Mapping[str, str], *names: str) -> str | None:
    """Return the first non-blank value among ``names``."""
    for name in names:
        value = (env.get(name) or "").strip()
        if value:
            return value
    return None


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    # Only an explicit opposite value flips the default
    value = (env.get(name) or "").strip().lower()
    if default:
        return value not in FALSE_VALUES
    return value in TRUE_VALUES


def _env_number(env: Mapping[str, str], name: str, kind: type, default: float | int):
    value = _first(env, name)
    if value is None:
        return default
    try:
        return kind(value)
    except ValueError as e:
        raise InvalidConfigError(f"{name} must be a number, got {value!r}") from e
