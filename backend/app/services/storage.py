"""S3-compatible object storage for ticket attachments."""

from __future__ import annotations

import logging
import re
import time
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Settings, settings
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)


def sanitize_filename(filename: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9.-]", "_", filename or "")
    return cleaned or "file"


class ObjectStorage:
    """Uploads attachment bytes and issues their public URLs."""

    def __init__(self, config: Settings = settings, client=None):
        self.bucket = config.STORAGE_BUCKET
        self.region = config.STORAGE_REGION
        self.endpoint_url = config.STORAGE_ENDPOINT_URL
        self.public_url = (config.STORAGE_PUBLIC_URL or self._default_public_url()).rstrip("/")
        if client is None:
            client = boto3.client(
                "s3",
                endpoint_url=config.STORAGE_ENDPOINT_URL,
                region_name=config.STORAGE_REGION,
                aws_access_key_id=config.STORAGE_ACCESS_KEY_ID,
                aws_secret_access_key=config.STORAGE_SECRET_ACCESS_KEY,
                config=Config(connect_timeout=5, read_timeout=10, retries={"max_attempts": 1}),
            )
        self.client = client

    def _default_public_url(self) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com"

    def build_key(self, filename: str) -> str:
        return f"{int(time.time() * 1000)}-{sanitize_filename(filename)}"

    def url_for(self, key: str) -> str:
        return f"{self.public_url}/{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        """Return the object key for URLs issued by this storage, else ``None``."""
        prefix = f"{self.public_url}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):] or None

    def upload(self, content: bytes, filename: str, content_type: str) -> str:
        key = self.build_key(filename)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error(f"Upload of {filename} to bucket {self.bucket} failed: {exc}")
            raise StorageError(f"Failed to upload file: {exc}") from exc

        url = self.url_for(key)
        logger.info(f"Uploaded {len(content)} bytes to {url}")
        return url

    def delete(self, url: str) -> bool:
        """Remove the object behind ``url``; returns False for foreign URLs."""
        key = self.key_from_url(url)
        if key is None:
            return False
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to delete file: {exc}") from exc
        logger.info(f"Deleted stored object {key}")
        return True
