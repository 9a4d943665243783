"""Custom exception hierarchy for pulsescan.

Findings are never exceptions: scanners report them as a boolean and the
pipeline decides what to do. Everything here is an actual failure.
"""


class PulseScanError(Exception):
    """Base exception for all pulsescan errors.

    All custom exceptions should inherit from this class to allow
    callers to catch all pulsescan-specific errors with a single
    except clause when appropriate.
    """
    pass


# =============================================================================
# Scanner Errors
# =============================================================================

class ScannerError(PulseScanError):
    """Base exception for scanner-related errors."""
    pass


class ScanExecutionError(ScannerError):
    """External tool could not be started or exited with an unexpected code."""

    def __init__(self, message: str, command: list[str] | None = None, exit_code: int | None = None):
        super().__init__(message)
        self.command = command or []
        self.exit_code = exit_code


class MalformedReportError(ScannerError):
    """A report file exists but is not valid JSON."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class NoReportsError(ScannerError):
    """None of the expected report files could be read."""
    pass


# =============================================================================
# Client Errors (API/Network)
# =============================================================================

class ClientError(PulseScanError):
    """Base exception for API client errors."""
    pass


class NetworkError(ClientError):
    """Network connectivity or request error."""
    pass


class APIError(ClientError):
    """Error returned by the upload API."""

    def __init__(self, message: str, status_code: int | None = None, response_body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class UploadTimeoutError(ClientError):
    """API request timed out."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(PulseScanError):
    """Base exception for configuration errors."""
    pass


class InvalidConfigError(ConfigurationError):
    """An environment value could not be interpreted."""
    pass
