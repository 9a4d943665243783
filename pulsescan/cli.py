from __future__ import annotations

import argparse
import logging
import os

from pydantic import ValidationError

from pulsescan import __version__
from pulsescan.config import PulseScanConfig
from pulsescan.core.exceptions import ConfigurationError, PulseScanError
from pulsescan.logging_config import configure_logging
from pulsescan.pipeline import (
    EXIT_FAILURE,
    EXIT_OK,
    ScanPipeline,
    create_upload_client,
    process_and_send_reports,
)

logger = logging.getLogger("pulsescan.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pulsescan",
        description="Run SBOM, config, vulnerability and secret scans and upload the reports",
        epilog=(
            "Configuration is read from the environment: NT_API_ENDPOINT, NT_API_KEY, "
            "NT_SECRET_KEY, PROJECT_ID, ORGANIZATION_ID, BUILD_ID/BUILD_NUMBER, "
            "JOB_NAME/REPO_NAME, GIT_BRANCH/BRANCH_NAME, WORKSPACE, DEBUG_MODE, "
            "FAIL_ON_MISCONFIGURATION, FAIL_ON_VULNERABILITY, FAIL_ON_SECRET."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Run every scan and upload the results (default)")

    upload_parser = subparsers.add_parser(
        "upload", help="Print and upload reports that already exist in a directory"
    )
    upload_parser.add_argument("output_dir", help="Directory containing the scan reports")
    upload_parser.add_argument("base_url", nargs="?", default=None, help="Overrides NT_API_ENDPOINT")
    upload_parser.add_argument("auth_token", nargs="?", default=None, help="Sent as a Bearer token")

    return parser


def main(argv: list[str] | None = None, environ: dict[str, str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = PulseScanConfig.from_env(os.environ if environ is None else environ)
    except (ConfigurationError, ValidationError) as exc:
        parser.error(str(exc))

    configure_logging(debug=config.debug, log_file=config.log_file)

    if args.command == "upload":
        if args.base_url:
            config = config.model_copy(update={"api_endpoint": args.base_url})
        headers = {"Authorization": f"Bearer {args.auth_token}"} if args.auth_token else None
        try:
            with create_upload_client(config, headers=headers) as client:
                process_and_send_reports(args.output_dir, config, client=client)
        except PulseScanError as exc:
            logger.error(f"\nOperation failed: {exc}")
            return EXIT_FAILURE
        logger.info("\nOperation completed successfully")
        return EXIT_OK

    return ScanPipeline(config).run()


if __name__ == "__main__":
    raise SystemExit(main())
