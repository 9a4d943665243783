"""Core utilities: command execution and the exception hierarchy."""

from .command import CommandResult, CommandRunner
from .exceptions import (
    APIError,
    ClientError,
    ConfigurationError,
    InvalidConfigError,
    MalformedReportError,
    NetworkError,
    NoReportsError,
    PulseScanError,
    ScanExecutionError,
    ScannerError,
    UploadTimeoutError,
)

__all__ = [
    # Commands
    "CommandResult",
    "CommandRunner",
    # Exceptions
    "APIError",
    "ClientError",
    "ConfigurationError",
    "InvalidConfigError",
    "MalformedReportError",
    "NetworkError",
    "NoReportsError",
    "PulseScanError",
    "ScanExecutionError",
    "ScannerError",
    "UploadTimeoutError",
]
