"""S3-compatible object storage target (AWS, Wasabi, MinIO)."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from osl_backup.storage import is_artifact

if TYPE_CHECKING:
    from osl_backup.config import BackupConfig

logger = logging.getLogger(__name__)


class S3Target:
    """Copy backups to ``s3://bucket/prefix`` and prune old ones there."""

    def __init__(
        self,
        uri: str,
        endpoint_url: str | None = None,
        region: str | None = None,
        session: boto3.session.Session | None = None,
    ) -> None:
        parsed = urlparse(uri)
        self.uri = uri.rstrip("/")
        self.bucket = parsed.netloc
        self.prefix = parsed.path.strip("/")
        self.endpoint_url = endpoint_url
        self.session = session or boto3.session.Session(region_name=region)
        self._client = None

    @classmethod
    def from_config(cls, config: BackupConfig) -> S3Target:
        return cls(config.s3_bucket, endpoint_url=config.s3_endpoint_url, region=config.s3_region)

    @property
    def client(self):
        if self._client is None:
            self._client = self.session.client("s3", endpoint_url=self.endpoint_url)
        return self._client

    def available(self) -> bool:
        """True when AWS credentials can be resolved."""
        try:
            return self.session.get_credentials() is not None
        except BotoCoreError as e:
            logger.warning(f"AWS credentials unavailable: {e}")
            return False

    @property
    def _list_prefix(self) -> str:
        return f"{self.prefix}/" if self.prefix else ""

    def upload(self, path: Path) -> bool:
        key = f"{self._list_prefix}{path.name}"
        try:
            self.client.upload_file(
                str(path),
                self.bucket,
                key,
                ExtraArgs={"ContentType": "application/gzip"},
            )
        except (BotoCoreError, ClientError, S3UploadFailedError) as e:
            logger.error(f"Failed to upload to S3: {e}")
            return False

        logger.info(f"Uploaded to s3://{self.bucket}/{key}")
        return True

    def cleanup_old(self, retention_days: int, now: datetime | None = None) -> int:
        """Delete artifacts directly under the prefix dated before the cutoff day."""
        cutoff = ((now or datetime.now(UTC)) - timedelta(days=retention_days)).astimezone(UTC).date()
        prefix = self._list_prefix
        deleted = 0

        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix, Delimiter="/"):
                for obj in page.get("Contents", []):
                    name = obj["Key"][len(prefix) :]
                    modified = obj["LastModified"].astimezone(UTC).date()
                    if modified < cutoff and is_artifact(name):
                        logger.info(f"Deleting old S3 backup: {name}")
                        self.client.delete_object(Bucket=self.bucket, Key=obj["Key"])
                        deleted += 1
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 cleanup failed: {e}")

        return deleted
