"""Object storage service for sighting attachments.

Uses MinIO (S3-compatible) as the blob store. Objects are addressed by the
key recorded on the sighting (``img:{sighting_id}:{index}``) and carry
their content type. Any object with the attachment prefix is expired by a
bucket lifecycle rule, which bounds the life of orphaned attachments.
"""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from minio import Minio
from minio.commonconfig import ENABLED, Filter
from minio.error import S3Error
from minio.lifecycleconfig import Expiration, LifecycleConfig, Rule

from sightings_api.errors import NotFoundError, StorageError
from sightings_api.settings import get_settings

logger = logging.getLogger(__name__)

ATTACHMENT_PREFIX = "img:"


@dataclass(frozen=True)
class StoredObject:
    """Bytes of a stored attachment plus its content type."""

    data: bytes
    content_type: str


class StorageService:
    """Object storage service for sighting attachments."""

    def __init__(self, client: Optional[Minio] = None, bucket: Optional[str] = None):
        """Initialize storage service with a MinIO client."""
        settings = get_settings()
        self.bucket = bucket or settings.minio_bucket
        if client is not None:
            self.client = client
            return
        try:
            self.client = Minio(
                settings.minio_endpoint,
                access_key=settings.minio_access_key,
                secret_key=settings.minio_secret_key,
                secure=settings.minio_use_ssl,
            )
            self._ensure_bucket(settings.attachment_ttl_days)
        except Exception as e:
            logger.error(f"Failed to initialize MinIO client: {e}")
            self.client = None

    def _ensure_bucket(self, ttl_days: int):
        """Create the bucket and its attachment expiry rule if missing."""
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)
            logger.info(f"Created bucket: {self.bucket}")
        # The expiry rule only bounds orphaned attachments; the bucket stays usable without it
        try:
            self.client.set_bucket_lifecycle(
                self.bucket,
                LifecycleConfig(
                    [
                        Rule(
                            ENABLED,
                            rule_filter=Filter(prefix=ATTACHMENT_PREFIX),
                            rule_id="expire-attachments",
                            expiration=Expiration(days=ttl_days),
                        )
                    ]
                ),
            )
        except S3Error as e:
            logger.warning(f"Could not set lifecycle rule on bucket {self.bucket}: {e}")

    def _require_client(self) -> Minio:
        if not self.client:
            raise StorageError("Storage client not available")
        return self.client

    @staticmethod
    def build_object_key(sighting_id: str, index: int) -> str:
        """
        Build object key for a sighting attachment.

        Format: img:{sighting_id}:{index}

        The id is a server-generated UUID, so keys of different sightings
        never collide.
        """
        return f"{ATTACHMENT_PREFIX}{sighting_id}:{index}"

    def put_object(self, object_key: str, data: bytes, content_type: str) -> str:
        """
        Upload an attachment.

        Args:
            object_key: Key recorded on the sighting
            data: Attachment bytes
            content_type: MIME type served back on read

        Returns:
            Object key

        Raises:
            StorageError: If the upload fails
        """
        client = self._require_client()
        try:
            client.put_object(
                self.bucket,
                object_key,
                BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except S3Error as e:
            logger.error(f"Failed to upload object {object_key}: {e}")
            raise StorageError(f"Failed to upload object {object_key}") from e
        logger.debug(f"Uploaded object: {object_key} ({len(data)} bytes)")
        return object_key

    def get_object(self, object_key: str) -> StoredObject:
        """
        Retrieve an attachment.

        Raises:
            NotFoundError: If the object does not exist
            StorageError: If the read fails
        """
        client = self._require_client()
        try:
            response = client.get_object(self.bucket, object_key)
        except S3Error as e:
            if e.code == "NoSuchKey":
                raise NotFoundError(f"Object not found: {object_key}") from e
            logger.error(f"Failed to retrieve object {object_key}: {e}")
            raise StorageError(f"Failed to retrieve object {object_key}") from e
        try:
            data = response.read()
            content_type = response.headers.get("Content-Type") or "application/octet-stream"
        finally:
            response.close()
            response.release_conn()
        return StoredObject(data=data, content_type=content_type)

    def delete_object(self, object_key: str) -> None:
        """Delete an attachment. Deleting a missing key is a no-op."""
        client = self._require_client()
        try:
            client.remove_object(self.bucket, object_key)
        except S3Error as e:
            if e.code == "NoSuchKey":
                return
            logger.error(f"Failed to delete object {object_key}: {e}")
            raise StorageError(f"Failed to delete object {object_key}") from e
        logger.debug(f"Deleted object: {object_key}")

    def bucket_available(self) -> bool:
        """Check that the client is configured and the bucket is reachable."""
        client = self._require_client()
        return client.bucket_exists(self.bucket)


# Global instance
_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """Get or create storage service instance."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
