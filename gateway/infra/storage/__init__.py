"""Object storage abstraction layer.

This module provides a protocol-based abstraction for object storage backends,
enabling support for S3, MinIO, and other S3-compatible services.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .client import (
    ObjectNotFoundError,
    StorageBackendNotConfiguredError,
    StorageClient,
    StorageError,
    StoredObject,
)

if TYPE_CHECKING:
    from gateway.common.config import Settings


def build_storage_client(settings: "Settings") -> StorageClient:
    """Build the storage client selected by ``STORAGE_BACKEND``."""
    backend = (settings.STORAGE_BACKEND or "").strip().lower()
    if backend != "s3":
        raise StorageBackendNotConfiguredError(
            f"Unsupported storage backend: {backend}. Only 's3' is supported."
        )

    from .s3_client import S3StorageClient

    return S3StorageClient(settings=settings)


__all__ = [
    "ObjectNotFoundError",
    "StorageBackendNotConfiguredError",
    "StorageClient",
    "StorageError",
    "StoredObject",
    "build_storage_client",
]
