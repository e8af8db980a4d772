"""
Accounting Notes Backend: Object Storage Service
================================================

What:  Publishes and removes narration files in an S3-compatible bucket
       (Cloudflare R2) and builds their public URLs.
How:   A boto3 S3 client configured from settings. boto3 is blocking, so each
       call runs in a worker thread via asyncio.to_thread.
Who:   NotesService (publish/remove), Topic/Category services (remove on
       delete), health route (health_check).

Keys:
    One object per topic: "<topic-id>.mp3". Publishing the same key again
    overwrites it.

Error policy:
    publish  → StorageError on any failure
    remove   → "not found" is logged and swallowed, anything else StorageError
    client   → a client that cannot be built (bad endpoint) is a StorageError too
"""

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import quote
from uuid import UUID

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings
from app.exceptions import StorageError

logger = logging.getLogger(__name__)

# Error codes S3/R2 use for a missing object
_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}

# Same set encodeURIComponent leaves unescaped
_URL_SAFE_CHARS = "-_.!~*'()"


class StorageService:
    """
    Thin async wrapper over the bucket client.

    Args:
        client:     Pre-built S3 client (tests pass a MagicMock).
        bucket:     Bucket name, defaults to settings.r2_bucket.
        public_url: Base URL serving the bucket, defaults to settings.r2_public_url.
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        bucket: Optional[str] = None,
        public_url: Optional[str] = None,
    ):
        self._client = client
        self.bucket = bucket if bucket is not None else settings.r2_bucket
        self.public_url = (public_url if public_url is not None else settings.r2_public_url).rstrip("/")

    @property
    def client(self) -> Any:
        # Built lazily so importing the module never needs credentials
        if self._client is None:
            try:
                self._client = boto3.client(
                    "s3",
                    endpoint_url=settings.r2_endpoint or None,
                    region_name=settings.r2_region,
                    aws_access_key_id=settings.r2_access_key or None,
                    aws_secret_access_key=settings.r2_secret_key or None,
                    config=Config(
                        connect_timeout=settings.storage_connect_timeout,
                        read_timeout=settings.storage_read_timeout,
                        retries={"max_attempts": settings.storage_max_attempts, "mode": "standard"},
                    ),
                )
            except (BotoCoreError, ValueError) as e:
                # e.g. a malformed R2_ENDPOINT
                logger.error("S3 client for bucket=%s could not be created: %s", self.bucket, str(e))
                raise StorageError(
                    message="Magazyn plików jest niedostępny",
                    context={"error_type": type(e).__name__},
                )
            logger.info("S3 client created for bucket=%s", self.bucket)
        return self._client

    @staticmethod
    def audio_key(topic_id: UUID) -> str:
        return f"{topic_id}.mp3"

    def public_url_for(self, key: str) -> str:
        return f"{self.public_url}/{quote(key, safe=_URL_SAFE_CHARS)}"

    async def publish(self, data: bytes, key: str, content_type: str) -> str:
        """
        Uploads `data` under `key` and returns its public URL.

        Objects are served inline with a no-transform cache hint so CDNs do
        not re-encode the audio.

        Raises:
            StorageError: upload failed
        """
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                ContentDisposition="inline",
                Metadata={"cache-control": "no-transform"},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Upload of %s failed: %s", key, str(e))
            raise StorageError(
                message="Nie udało się zapisać pliku audio",
                key=key,
                context={"error_type": type(e).__name__},
            )

        url = self.public_url_for(key)
        logger.info("Published %s (%d bytes)", key, len(data))
        return url

    async def remove(self, key: str) -> None:
        """
        Deletes `key`. A missing object is not an error.

        Raises:
            StorageError: delete failed for another reason
        """
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)
            logger.info("Removed %s", key)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                logger.warning("Object %s not found, nothing to remove", key)
                return
            logger.error("Delete of %s failed: %s", key, str(e))
            raise StorageError(key=key, context={"code": code})
        except BotoCoreError as e:
            logger.error("Delete of %s failed: %s", key, str(e))
            raise StorageError(key=key, context={"error_type": type(e).__name__})

    async def health_check(self) -> bool:
        """HeadBucket probe; False on any failure."""
        if not self.bucket:
            return False
        try:
            await asyncio.to_thread(self.client.head_bucket, Bucket=self.bucket)
            return True
        except Exception as e:
            logger.warning("Storage health check failed: %s", str(e))
            return False


# ── Singleton Instance ────────────────────────────────────────────────────
storage_service = StorageService()
