"""
Abstract base class for blob storage providers.
This interface allows easy swapping between different storage backends (R2, S3, GCS, etc.)
"""
from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from recipebox.app.domain.errors import StorageError
from recipebox.app.domain.models import SignedUpload, StoredBlob

logger = logging.getLogger(__name__)

UPLOAD_URL_EXPIRES_SECONDS = 3600
IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/avif": "avif",
    "image/heic": "heic",
}


class StorageProvider(ABC):
    """
    Abstract interface for object storage operations.

    Object keys are the opaque handles recipes keep in ``image_ref``.

    Implementations:
    - R2StorageProvider: Cloudflare R2 (S3-compatible)
    """

    @abstractmethod
    def store(self, data: bytes, content_type: str, object_key: str) -> str:
        """
        Write bytes under the given key.

        Args:
            data: Object body
            content_type: MIME type of the content (e.g., "image/jpeg")
            object_key: Destination key

        Returns:
            The key the object was stored under
        """
        pass

    @abstractmethod
    def get_bytes(self, object_key: str) -> StoredBlob:
        """
        Read an object back.

        Raises:
            StorageDownloadError: If the object is missing or unreadable
        """
        pass

    @abstractmethod
    def generate_signed_put_url(
        self,
        object_key: str,
        content_type: str,
        expires_seconds: int = UPLOAD_URL_EXPIRES_SECONDS,
    ) -> tuple[str, datetime]:
        """
        Generate a pre-signed URL for uploading an object.

        Returns:
            Tuple of (signed_url, expiration_datetime)
        """
        pass

    @abstractmethod
    def generate_signed_get_url(
        self,
        object_key: str,
        expires_seconds: int = UPLOAD_URL_EXPIRES_SECONDS,
    ) -> str:
        """Generate a pre-signed URL for downloading an object."""
        pass

    @abstractmethod
    def delete_object(self, object_key: str) -> bool:
        """
        Delete an object from storage.

        Returns:
            True if deletion was successful
        """
        pass

    def get_url(self, object_key: str) -> Optional[str]:
        """Display URL for an object, or None when one cannot be produced."""
        try:
            return self.generate_signed_get_url(object_key)
        except StorageError as error:
            logger.warning("No display URL for %s: %s", object_key, error)
            return None

    def generate_upload_url(
        self,
        user_id: str,
        content_type: str = "image/jpeg",
        filename: str = "photo",
    ) -> SignedUpload:
        """Pre-signed direct-upload target for a user's recipe photo."""
        object_key = self.generate_object_key(user_id, filename, content_type=content_type, prefix="uploads")
        upload_url, expires_at = self.generate_signed_put_url(object_key, content_type)
        return SignedUpload(object_key=object_key, upload_url=upload_url, expires_at=expires_at)

    def generate_object_key(
        self,
        user_id: str,
        filename: str,
        content_type: Optional[str] = None,
        prefix: str = "recipe-images",
    ) -> str:
        """
        Generate a standardized object key for a recipe image.

        Format: users/{user_id}/{prefix}/{YYYY}/{MM}/{uuid}_{filename}
        """
        now = datetime.now(timezone.utc)
        safe_filename = re.sub(r"[^a-zA-Z0-9._-]", "_", filename)
        extension = IMAGE_EXTENSIONS.get(content_type or "")
        if extension and "." not in safe_filename:
            safe_filename = f"{safe_filename}.{extension}"
        unique_id = uuid4().hex[:8]

        return f"users/{user_id}/{prefix}/{now:%Y}/{now:%m}/{unique_id}_{safe_filename}"
