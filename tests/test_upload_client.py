"""Tests for the upload client."""

import json
from unittest.mock import Mock, patch

import httpx
import pytest

from pulsescan.clients.upload_client import (
    UploadClient,
    UploadResponse,
    build_upload_url,
    retry_delay,
)
from pulsescan.config import UploadMetadata
from pulsescan.core.exceptions import APIError, NetworkError, UploadTimeoutError
from pulsescan.reports.models import CombinedScanRequest, SecretFinding


@pytest.fixture
def combined_request():
    return CombinedScanRequest(
        config_scan_response_dto=None,
        scanner_secret_response=[SecretFinding(rule_id="aws", file="a.py", secret="AKIA")],
        repo_name="demo-repo",
        branch_name="main",
    )


@pytest.fixture
def sbom_file(tmp_path):
    path = tmp_path / "cyclonedx.json"
    path.write_text('{"bomFormat": "CycloneDX"}', encoding="utf-8")
    return path


class Recorder:
    """MockTransport handler that stores requests and replays responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_client(handler, **kwargs) -> UploadClient:
    kwargs.setdefault("api_key", "key-1234567890")
    kwargs.setdefault("secret_key", "secret-1234567890")
    return UploadClient("https://api.example.com", transport=httpx.MockTransport(handler), **kwargs)


class TestBuildUploadUrl:
    def test_without_project(self):
        assert build_upload_url("https://api.example.com") == (
            "https://api.example.com/open-pulse/project/upload-all"
        )

    def test_with_project(self):
        url = build_upload_url("https://api.example.com", "abc-123")
        assert url.endswith("/upload-all/abc-123")

    def test_project_id_is_escaped(self):
        url = build_upload_url("https://api.example.com", "team a/b")
        assert url.endswith("/upload-all/team%20a%2Fb")

    def test_trailing_slash_on_endpoint(self):
        assert build_upload_url("https://api.example.com/") == (
            "https://api.example.com/open-pulse/project/upload-all"
        )

    def test_empty_project_id_omitted(self):
        assert build_upload_url("https://api.example.com", "").endswith("/upload-all")


class TestRetryDelay:
    def test_exponential_and_capped(self):
        assert [retry_delay(n) for n in range(6)] == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]


class TestBuildForm:
    def test_all_fields(self, combined_request, sbom_file):
        client = UploadClient("https://api.example.com")
        metadata = UploadMetadata(organization_id="org-1", job_id="42", repo_name="demo-repo", branch_name="main")

        data, files = client.build_form(combined_request, sbom_file, metadata)

        assert data == {
            "displayName": "sbom",
            "source": "jenkins",
            "organizationId": "org-1",
            "jobId": "42",
            "repoName": "demo-repo",
            "branchName": "main",
        }
        filename, payload, content_type = files["combinedScanRequest"]
        assert filename is None
        assert content_type == "application/json"
        decoded = json.loads(payload)
        assert decoded["repoName"] == "demo-repo"
        assert decoded["configScanResponseDto"] is None
        assert decoded["scannerSecretResponse"][0]["RuleID"] == "aws"
        assert files["sbomFile"] == ("cyclonedx.json", sbom_file.read_bytes(), "application/json")

    def test_optional_fields_omitted(self, combined_request, tmp_path):
        client = UploadClient("https://api.example.com")

        data, files = client.build_form(combined_request, tmp_path / "missing.json", UploadMetadata())

        assert data == {"displayName": "sbom", "source": "jenkins"}
        assert "sbomFile" not in files


class TestUploadClient:
    def test_headers(self):
        client = UploadClient(
            "https://api.example.com",
            api_key="k",
            secret_key="s",
            headers={"Authorization": "Bearer t"},
        )

        assert client.client.headers["x-api-key"] == "k"
        assert client.client.headers["x-secret-key"] == "s"
        assert client.client.headers["Authorization"] == "Bearer t"
        assert client.client.headers["User-Agent"].startswith("pulsescan/")

    def test_context_manager(self):
        with UploadClient("https://api.example.com") as client:
            assert not client.client.is_closed
        assert client.client.is_closed

    def test_default_timeout(self):
        client = UploadClient("https://api.example.com")
        assert client.client.timeout.read == 60

    def test_successful_upload(self, combined_request, sbom_file):
        handler = Recorder(httpx.Response(200, json={"id": "scan-1"}))
        client = make_client(handler, project_id="abc-123")

        result = client.upload(combined_request, sbom_file, UploadMetadata(job_id="7"))

        assert result == UploadResponse(status_code=200, data={"id": "scan-1"})
        request = handler.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/open-pulse/project/upload-all/abc-123"
        assert request.headers["x-api-key"] == "key-1234567890"
        assert request.headers["content-type"].startswith("multipart/form-data; boundary=")
        body = request.content
        assert b'name="combinedScanRequest"' in body
        assert b'name="sbomFile"; filename="cyclonedx.json"' in body
        assert b'name="jobId"' in body
        assert b'name="organizationId"' not in body

    def test_non_json_response(self, combined_request, sbom_file):
        client = make_client(Recorder(httpx.Response(201, text="accepted")))

        result = client.upload(combined_request, sbom_file, UploadMetadata())

        assert result.status_code == 201
        assert result.data == "accepted"

    def test_empty_response(self, combined_request, sbom_file):
        client = make_client(Recorder(httpx.Response(204)))
        assert client.upload(combined_request, sbom_file, UploadMetadata()).data == {}

    def test_error_status(self, combined_request, sbom_file):
        client = make_client(Recorder(httpx.Response(401, text="bad credentials")))

        with pytest.raises(APIError) as exc_info:
            client.upload(combined_request, sbom_file, UploadMetadata())

        assert exc_info.value.status_code == 401
        assert exc_info.value.response_body == "bad credentials"
        assert "401" in str(exc_info.value)

    def test_error_status_not_retried(self, combined_request, sbom_file):
        handler = Recorder(httpx.Response(500, text="boom"), httpx.Response(200, json={}))
        client = make_client(handler, retries=2, sleep=Mock())

        with pytest.raises(APIError):
            client.upload(combined_request, sbom_file, UploadMetadata())

        assert len(handler.requests) == 1

    def test_timeout(self, combined_request, sbom_file):
        handler = Recorder(httpx.ReadTimeout("timed out"))
        client = make_client(handler)

        with pytest.raises(UploadTimeoutError, match="timeout"):
            client.upload(combined_request, sbom_file, UploadMetadata())

        assert len(handler.requests) == 1

    def test_network_error(self, combined_request, sbom_file):
        client = make_client(Recorder(httpx.ConnectError("connection refused")))

        with pytest.raises(NetworkError, match="connection refused"):
            client.upload(combined_request, sbom_file, UploadMetadata())

    def test_undecodable_response_is_network_error(self, combined_request, sbom_file):
        handler = Recorder(
            httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip"),
            httpx.Response(200, json={}),
        )
        sleep = Mock()
        client = make_client(handler, retries=1, sleep=sleep)

        with pytest.raises(NetworkError, match="API request failed"):
            client.upload(combined_request, sbom_file, UploadMetadata())

        assert len(handler.requests) == 1
        sleep.assert_not_called()

    def test_opt_in_retries_with_backoff(self, combined_request, sbom_file):
        handler = Recorder(
            httpx.ReadTimeout("timed out"),
            httpx.ConnectError("refused"),
            httpx.Response(200, json={"ok": True}),
        )
        sleep = Mock()
        client = make_client(handler, retries=3, sleep=sleep)

        result = client.upload(combined_request, sbom_file, UploadMetadata())

        assert result.data == {"ok": True}
        assert len(handler.requests) == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    def test_retries_exhausted(self, combined_request, sbom_file):
        handler = Recorder(httpx.ReadTimeout("t1"), httpx.ReadTimeout("t2"))
        sleep = Mock()
        client = make_client(handler, retries=1, sleep=sleep)

        with pytest.raises(UploadTimeoutError):
            client.upload(combined_request, sbom_file, UploadMetadata())

        assert sleep.call_count == 1

    def test_debug_logging_masks_keys(self, combined_request, sbom_file, caplog):
        client = make_client(Recorder(httpx.Response(200, json={})))

        with caplog.at_level("DEBUG", logger="pulsescan"):
            client.upload(combined_request, sbom_file, UploadMetadata())

        assert "key-1234567890" not in caplog.text
        assert "secret-1234567890" not in caplog.text
        assert "key-****7890" in caplog.text

    def test_patched_post(self, combined_request, sbom_file):
        client = UploadClient("https://api.example.com")
        response = httpx.Response(
            200, json={"status": "ok"}, request=httpx.Request("POST", client.url)
        )

        with patch.object(client.client, "post", return_value=response) as mock_post:
            client.upload(combined_request, sbom_file, UploadMetadata())

        mock_post.assert_called_once()
        assert mock_post.call_args.args[0] == client.url
