from __future__ import annotations

from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..core.exceptions import StorageError
from ..logging_config import get_logger
from .base import ObjectStorage, StoredObject

logger = get_logger(__name__)


class S3ObjectStorage(ObjectStorage):
    """Badge images in an S3 bucket under ``prefix``."""

    def __init__(
        self,
        bucket: str,
        *,
        prefix: str = "badges/",
        public_base_url: Optional[str] = None,
        client: Any = None,
    ):
        if not bucket:
            raise StorageError("S3 bucket is not configured")
        self._bucket = bucket
        self._prefix = prefix
        self._public_base_url = (public_base_url or f"https://{bucket}.s3.amazonaws.com").rstrip("/")
        self._client = client or boto3.client("s3")

    def store(self, data: bytes, name: str, content_type: str) -> StoredObject:
        key = f"{self._prefix}{name}"
        try:
            self._client.put_object(Bucket=self._bucket, Key=key, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            logger.error("s3_upload_failed", bucket=self._bucket, key=key, error=str(e))
            raise StorageError(f"S3 upload failed for {key}: {e}") from e

        logger.debug("s3_object_stored", bucket=self._bucket, key=key, size=len(data))
        return StoredObject(key=key, url=f"{self._public_base_url}/{key}")

    def set_public_readable(self, obj: StoredObject) -> None:
        try:
            self._client.put_object_acl(Bucket=self._bucket, Key=obj.key, ACL="public-read")
        except (ClientError, BotoCoreError) as e:
            logger.error("s3_acl_failed", bucket=self._bucket, key=obj.key, error=str(e))
            raise StorageError(f"Could not share {obj.key}: {e}") from e
