"""S3-compatible storage client implementation.

This module provides an S3-compatible storage client that works with
AWS S3, MinIO, and other S3-compatible object storage services.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from gateway.infra.storage.client import (
    ObjectNotFoundError,
    StorageBackendNotConfiguredError,
    StorageError,
    StoredObject,
)

if TYPE_CHECKING:
    from gateway.common.config import Settings

NOT_FOUND_ERROR_CODES = frozenset({"NoSuchKey", "NotFound", "404"})


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3StorageClient:
    """S3-compatible object storage client bound to one bucket.

    Supports AWS S3, MinIO, and other S3-compatible services.
    Uses boto3 for all storage operations. Credentials fall back to the
    default boto3 credential chain when they are not configured.
    """

    def __init__(self, *, settings: "Settings") -> None:
        """Initialize the S3 client with configuration from settings.

        Args:
            settings: Application settings containing S3 configuration.

        Raises:
            StorageBackendNotConfiguredError: If no bucket is configured.
        """
        if not settings.S3_BUCKET:
            raise StorageBackendNotConfiguredError("S3_BUCKET is required")
        self._bucket = settings.S3_BUCKET
        self._client = self._build_client(settings)

    @property
    def bucket(self) -> str:
        return self._bucket

    @staticmethod
    def _build_client(settings: "Settings") -> Any:
        """Create a boto3 S3 client from settings."""
        config = Config(
            s3={"addressing_style": settings.S3_ADDRESSING_STYLE},
            retries={"max_attempts": settings.S3_MAX_ATTEMPTS, "mode": "standard"},
        )

        return boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            region_name=settings.S3_REGION,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            use_ssl=bool(settings.S3_USE_SSL),
            config=config,
        )

    def put_object(
        self,
        *,
        object_key: str,
        payload: bytes,
        content_type: str,
    ) -> None:
        """Store an object in a single PUT request."""
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=object_key,
                Body=payload,
                ContentType=content_type,
            )
        except Exception as exc:
            raise StorageError(f"Failed to upload object: {exc}") from exc

    def get_object(self, *, object_key: str) -> StoredObject:
        """Download an object fully into memory."""
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=object_key)
        except ClientError as exc:
            if _error_code(exc) in NOT_FOUND_ERROR_CODES:
                raise ObjectNotFoundError(f"Object not found: {object_key}") from exc
            raise StorageError(f"Failed to get object: {exc}") from exc
        except Exception as exc:
            raise StorageError(f"Failed to get object: {exc}") from exc

        body = response.get("Body")
        if body is None:
            raise StorageError("S3 response missing Body")
        try:
            payload = body.read()
        except Exception as exc:
            raise StorageError(f"Failed to read object body: {exc}") from exc
        finally:
            body.close()

        return StoredObject(
            payload=payload,
            content_type=response.get("ContentType"),
        )

    def delete_object(self, *, object_key: str) -> None:
        """Delete an object from storage."""
        try:
            self._client.delete_object(Bucket=self._bucket, Key=object_key)
        except Exception as exc:
            raise StorageError(f"Failed to delete object: {exc}") from exc

    def check_bucket(self) -> None:
        """Issue a HEAD request against the bucket."""
        try:
            self._client.head_bucket(Bucket=self._bucket)
        except Exception as exc:
            raise StorageError(f"Bucket is not reachable: {exc}") from exc
