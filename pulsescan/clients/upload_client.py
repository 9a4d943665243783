"""Client for the report upload endpoint."""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from .. import __version__
from ..config import UploadMetadata
from ..constants import (
    DEFAULT_UPLOAD_TIMEOUT,
    DISPLAY_NAME,
    RETRY_BACKOFF_BASE_SECONDS,
    RETRY_BACKOFF_MAX_SECONDS,
    UPLOAD_PATH,
    UPLOAD_SOURCE,
)
from ..core.exceptions import APIError, NetworkError, UploadTimeoutError
from ..logging_config import mask_value
from ..reports.models import CombinedScanRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResponse:
    status_code: int
    data: Any


def build_upload_url(endpoint: str, project_id: str | None = None) -> str:
    """Upload URL, scoped to ``project_id`` when one is given."""
    url = endpoint.rstrip("/") + UPLOAD_PATH
    if project_id:
        url += "/" + quote(project_id, safe="")
    return url


def retry_delay(attempt: int) -> float:
    """Seconds to wait after failed attempt number ``attempt`` (0-based)."""
    return min(RETRY_BACKOFF_BASE_SECONDS * (2 ** attempt), RETRY_BACKOFF_MAX_SECONDS)


class UploadClient:
    """Posts the combined scan request and SBOM as one multipart request.

    No request is retried unless ``retries`` is set; then only timeouts and
    transport errors are retried, with capped exponential backoff.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str = "",
        secret_key: str = "",
        project_id: str | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = DEFAULT_UPLOAD_TIMEOUT,
        retries: int = 0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.url = build_upload_url(endpoint, project_id)
        self.project_id = project_id
        self.retries = retries
        self.sleep = sleep
        self.headers = {
            "User-Agent": f"pulsescan/{__version__}",
            "x-api-key": api_key,
            "x-secret-key": secret_key,
        }
        if headers:
            self.headers.update(headers)
        self.client = httpx.Client(timeout=timeout, headers=self.headers, transport=transport)

    def __enter__(self) -> "UploadClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.client.close()

    def close(self) -> None:
        self.client.close()

    def build_form(
        self,
        request: CombinedScanRequest,
        sbom_path: str | Path | None,
        metadata: UploadMetadata,
    ) -> tuple[dict[str, str], dict[str, tuple[str | None, bytes, str]]]:
        """Return the ``data`` and ``files`` parts of the multipart body.

        The SBOM part is omitted when the file does not exist, as are the
        metadata fields that are unset.
        """
        payload = json.dumps(request.to_wire()).encode("utf-8")
        files: dict[str, tuple[str | None, bytes, str]] = {
            "combinedScanRequest": (None, payload, "application/json"),
        }

        if sbom_path is not None:
            path = Path(sbom_path)
            if path.is_file():
                files["sbomFile"] = (path.name, path.read_bytes(), "application/json")
            else:
                logger.debug(f"SBOM file not found, sending without it: {path}")

        data = {"displayName": DISPLAY_NAME, "source": UPLOAD_SOURCE}
        optional_fields = {
            "organizationId": metadata.organization_id,
            "jobId": metadata.job_id,
            "repoName": metadata.repo_name,
            "branchName": metadata.branch_name,
        }
        data.update({name: value for name, value in optional_fields.items() if value})
        return data, files

    def upload(
        self,
        request: CombinedScanRequest,
        sbom_path: str | Path | None,
        metadata: UploadMetadata,
    ) -> UploadResponse:
        """Send the reports.

        Raises:
            UploadTimeoutError: The request timed out on every attempt
            NetworkError: The request failed below HTTP on every attempt
            APIError: The API answered with a non-2xx status
        """
        logger.info(f"\nSending reports to API: {self.url}")
        data, files = self.build_form(request, sbom_path, metadata)
        self._log_request(data, files)

        response = self._post_with_retries(data, files)
        body = response.text
        logger.debug(f"API Response Status: {response.status_code}")
        logger.debug(f"Response Data: {body}")

        if not response.is_success:
            logger.error(f"API request failed with status {response.status_code}")
            raise APIError(
                f"API request failed with status {response.status_code}: {body}",
                status_code=response.status_code,
                response_body=body,
            )

        try:
            parsed = json.loads(body) if body else {}
            logger.info("Reports sent successfully")
        except json.JSONDecodeError:
            parsed = body
            logger.info("Reports sent successfully (non-JSON response)")
        return UploadResponse(status_code=response.status_code, data=parsed)

    def _post_with_retries(self, data: dict[str, str], files: dict[str, Any]) -> httpx.Response:
        attempts = self.retries + 1
        for attempt in range(attempts):
            try:
                return self.client.post(self.url, data=data, files=files)
            except httpx.TimeoutException as e:
                if attempt + 1 >= attempts:
                    raise UploadTimeoutError("API request timeout") from e
                error: Exception = e
            except httpx.TransportError as e:
                if attempt + 1 >= attempts:
                    logger.error(f"API request failed: {e}")
                    raise NetworkError(f"API request failed: {e}") from e
                error = e
            except httpx.RequestError as e:
                # Undecodable response and similar; not retried
                logger.error(f"API request failed: {e}")
                raise NetworkError(f"API request failed: {e}") from e

            delay = retry_delay(attempt)
            logger.warning(
                f"Upload attempt {attempt + 1}/{attempts} failed ({error}), retrying in {delay:.0f}s"
            )
            self.sleep(delay)

        # range() always returns or raises above
        raise NetworkError("API request was not attempted")

    def _log_request(self, data: dict[str, str], files: dict[str, Any]) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        logger.debug("\nMultipart Form Data Details:")
        for name, (filename, content, _) in files.items():
            label = f" ({filename})" if filename else ""
            logger.debug(f"  - {name}{label}: {len(content)} bytes")
        for name, value in data.items():
            logger.debug(f"  - {name}: {value}")
        logger.debug(f"Project ID: {self.project_id or 'NOT SET'}")
        logger.debug("Headers: {")
        for key, value in self.headers.items():
            sensitive = "key" in key.lower() or key.lower() == "authorization"
            shown = mask_value(value) if sensitive else value
            logger.debug(f'  "{key}": "{shown}"')
        logger.debug("}")
