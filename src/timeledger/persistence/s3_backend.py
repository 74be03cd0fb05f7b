"""S3 timesheet drop-zone implementing IFileStore.

Uploaded workbooks are read from their drop-zone keys and, once parsed, archived
under a prefix that preserves the original key, so ``dropzone/a/export.xlsx``
lands at ``processed/dropzone/a/export.xlsx``.
"""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import ClientError

from timeledger.core.exceptions import FileStoreError, StoreObjectNotFoundError

logger = logging.getLogger(__name__)

_MISSING_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def archive_key(prefix: str, path: str) -> str:
    """Archive destination for ``path``: the full source key under ``prefix``."""
    return prefix.rstrip("/") + "/" + path.lstrip("/")


class S3FileStore:
    """Production IFileStore backed by one S3 bucket."""

    def __init__(self, bucket: str, region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._bucket = bucket
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    def _error(self, exc: ClientError, path: str, action: str) -> FileStoreError:
        if exc.response.get("Error", {}).get("Code") in _MISSING_CODES:
            return StoreObjectNotFoundError(path)
        return FileStoreError(f"S3 {action} failed for {path!r}: {exc}")

    def read(self, path: str) -> bytes:
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=path)
        except ClientError as exc:
            raise self._error(exc, path, "read") from exc
        return resp["Body"].read()

    def archive(self, path: str, prefix: str) -> str:
        """Move ``path`` under ``prefix`` and return the archive key."""
        dst = archive_key(prefix, path)
        try:
            self._client.copy_object(
                Bucket=self._bucket,
                CopySource={"Bucket": self._bucket, "Key": path},
                Key=dst,
            )
        except ClientError as exc:
            raise self._error(exc, path, "archive") from exc
        try:
            self._client.delete_object(Bucket=self._bucket, Key=path)
        except ClientError as exc:
            raise self._error(exc, path, "archive cleanup") from exc
        logger.debug("s3://%s/%s archived to %s", self._bucket, path, dst)
        return dst

    def list_files(self, prefix: str) -> list[str]:
        """Keys under ``prefix`` in key order; folder placeholders are skipped."""
        keys: list[str] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                keys.extend(obj["Key"] for obj in page.get("Contents", [])
                            if not obj["Key"].endswith("/"))
        except ClientError as exc:
            raise self._error(exc, prefix, "list") from exc
        return sorted(keys)
