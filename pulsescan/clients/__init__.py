"""HTTP clients."""

from .upload_client import UploadClient, UploadResponse, build_upload_url

__all__ = [
    "UploadClient",
    "UploadResponse",
    "build_upload_url",
]
