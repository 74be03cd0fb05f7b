"""Pluggable file stores and directory backends behind Protocol interfaces."""

from __future__ import annotations

from timeledger.core.config import AppSettings
from timeledger.persistence.s3_backend import S3FileStore, archive_key


def create_file_store(settings: AppSettings | None = None) -> S3FileStore:
    """Create the timesheet drop-zone store from application settings."""
    if settings is None:
        settings = AppSettings()

    return S3FileStore(
        bucket=settings.s3.bucket,
        region=settings.s3.region,
        endpoint_url=settings.s3.endpoint_url,
    )


__all__ = ["S3FileStore", "archive_key", "create_file_store"]
