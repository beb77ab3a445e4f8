"""
Recipe image storage on Cloudflare R2.

Objects are addressed by key only; the S3 API is reached through boto3
against the account's R2 endpoint.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from recipebox.app.domain.errors import StorageDownloadError, StorageError
from recipebox.app.domain.models import StoredBlob
from recipebox.app.infra.storage.base import UPLOAD_URL_EXPIRES_SECONDS, StorageProvider

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
REQUIRED_SETTINGS = ("R2_ACCOUNT_ID", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY", "R2_BUCKET_NAME")


def _is_missing(error: ClientError) -> bool:
    error_code = error.response.get("Error", {}).get("Code", "Unknown")
    return error_code in ("404", "NoSuchKey")


class R2StorageProvider(StorageProvider):
    """
    Stores recipe photos in a single R2 bucket.

    ``public_url`` is the bucket's public domain, when it has one; display
    links then skip presigning. ``client`` replaces the boto3 client.
    """

    def __init__(
        self,
        account_id: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        bucket_name: Optional[str] = None,
        public_url: Optional[str] = None,
        client=None,
    ):
        self.bucket_name = bucket_name
        self.public_url = public_url

        if client is not None:
            self._client = client
            return

        credentials = (account_id, access_key_id, secret_access_key, bucket_name)
        missing = [name for name, value in zip(REQUIRED_SETTINGS, credentials) if not value]
        if missing:
            raise StorageError(f"Recipe image storage is not configured, missing: {', '.join(missing)}")

        endpoint_url = f"https://{account_id}.r2.cloudflarestorage.com"
        self._client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            # single attempt; the import pipeline never retries
            config=Config(signature_version="s3v4", retries={"max_attempts": 1, "mode": "standard"}),
            region_name="auto",
        )
        logger.info("Recipe images stored in R2 bucket %s", bucket_name)

    def store(self, data: bytes, content_type: str, object_key: str) -> str:
        try:
            self._client.put_object(
                Bucket=self.bucket_name,
                Key=object_key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to store object in R2: %s", e)
            raise StorageError(f"Failed to store object: {e}") from e

        logger.info("Stored object in R2: key=%s, size=%d bytes", object_key, len(data))
        return object_key

    def get_bytes(self, object_key: str) -> StoredBlob:
        try:
            response = self._client.get_object(Bucket=self.bucket_name, Key=object_key)
            data = response["Body"].read()
        except ClientError as e:
            if _is_missing(e):
                raise StorageDownloadError(object_key, "Object not found") from e
            logger.error("Reading %s from R2 failed: %s", object_key, e)
            raise StorageDownloadError(object_key, str(e)) from e
        except BotoCoreError as e:
            raise StorageDownloadError(object_key, str(e)) from e

        content_type = response.get("ContentType") or DEFAULT_CONTENT_TYPE
        return StoredBlob(data=data, content_type=content_type)

    def generate_signed_put_url(
        self,
        object_key: str,
        content_type: str,
        expires_seconds: int = UPLOAD_URL_EXPIRES_SECONDS,
    ) -> tuple[str, datetime]:
        """Presigned PUT the browser uses to upload a photo straight to the bucket."""
        try:
            url = self._client.generate_presigned_url(
                ClientMethod="put_object",
                Params={
                    "Bucket": self.bucket_name,
                    "Key": object_key,
                    "ContentType": content_type,
                },
                ExpiresIn=expires_seconds,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Presigning upload for %s failed: %s", object_key, e)
            raise StorageError(f"Failed to generate upload URL: {e}") from e

        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_seconds)
        logger.debug("Generated signed PUT URL: key=%s, expires=%s", object_key, expires_at.isoformat())
        return url, expires_at

    def generate_signed_get_url(
        self,
        object_key: str,
        expires_seconds: int = UPLOAD_URL_EXPIRES_SECONDS,
    ) -> str:
        """Generate a pre-signed GET URL, or a public one when the bucket has it."""
        if self.public_url:
            return f"{self.public_url.rstrip('/')}/{object_key}"

        try:
            return self._client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket_name, "Key": object_key},
                ExpiresIn=expires_seconds,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Presigning download for %s failed: %s", object_key, e)
            raise StorageError(f"Failed to generate download URL: {e}") from e

    def delete_object(self, object_key: str) -> bool:
        try:
            self._client.delete_object(Bucket=self.bucket_name, Key=object_key)
        except (ClientError, BotoCoreError) as e:
            logger.warning("Deleting %s from R2 failed: %s", object_key, e)
            return False

        logger.info("Deleted object from R2: key=%s", object_key)
        return True
