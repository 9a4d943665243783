"""pulsescan: run SBOM, config, vulnerability and secret scans in CI and upload the results."""

__version__ = "1.0.0"
