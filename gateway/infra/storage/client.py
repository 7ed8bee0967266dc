"""Storage client protocol and data types.

This module defines the interface the gateway uses to reach the object
store. A client is bound to a single bucket when it is constructed, so the
operations only take the object key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class ObjectNotFoundError(StorageError):
    """Raised when the requested object key does not exist in the bucket."""


class StorageBackendNotConfiguredError(Exception):
    """Raised when the storage backend is not properly configured."""


@dataclass(frozen=True, slots=True)
class StoredObject:
    """Payload and recorded content type of a stored object."""

    payload: bytes
    content_type: str | None


class StorageClient(Protocol):
    """Protocol defining the interface for object storage backends.

    Implementations must provide all methods defined here.
    Currently supports S3-compatible storage services.
    """

    @property
    def bucket(self) -> str:
        """Name of the bucket this client is bound to."""
        ...

    def put_object(
        self,
        *,
        object_key: str,
        payload: bytes,
        content_type: str,
    ) -> None:
        """Store *payload* under *object_key*, replacing any existing object.

        Args:
            object_key: Object key (path) in the bucket.
            payload: Full object content.
            content_type: MIME type recorded with the object.

        Raises:
            StorageError: If the write fails.
        """
        ...

    def get_object(self, *, object_key: str) -> StoredObject:
        """Read an object and its recorded content type.

        Args:
            object_key: Object key (path) in the bucket.

        Returns:
            StoredObject with the full payload.

        Raises:
            ObjectNotFoundError: If the key does not exist.
            StorageError: If the read fails for any other reason.
        """
        ...

    def delete_object(self, *, object_key: str) -> None:
        """Delete an object from storage.

        Args:
            object_key: Object key (path) to delete.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    def check_bucket(self) -> None:
        """Verify that the configured bucket is reachable.

        Raises:
            StorageError: If the bucket cannot be accessed.
        """
        ...
