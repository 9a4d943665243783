"""
Logging configuration for pulsescan.

Console output is plain text on stdout so it reads naturally in a CI job
log. An optional file handler writes one JSON object per record for
later inspection of a run.
"""

import json
import logging
import sys
from typing import Any

ROOT_LOGGER_NAME = "pulsescan"

# Extra fields copied into JSON log entries when present on the record
EVENT_FIELDS = ("event", "scanner", "category", "exit_code", "path", "url", "status_code")


class ScanEventFormatter(logging.Formatter):
    """Custom formatter for structured scan logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log records with structured data."""
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in EVENT_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry["error"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def configure_logging(
    debug: bool = False,
    log_file: str | None = None,
    enable_console: bool = True,
) -> None:
    """
    Configure the pulsescan logger hierarchy.

    Args:
        debug: Log DEBUG records (commands, request details) when True
        log_file: Path to a JSON-lines log file (optional)
        enable_console: Whether to log to stdout
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

    # Clear existing handlers so repeated calls do not duplicate output
    logger.handlers.clear()

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(ScanEventFormatter())
        logger.addHandler(file_handler)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console_handler)


def mask_value(value: str | None) -> str:
    """Mask a credential or secret for debug output.

    Short values are fully hidden; longer ones keep four characters at
    each end.
    """
    if not value or len(value) <= 8:
        return "****"
    return f"{value[:4]}****{value[-4:]}"
