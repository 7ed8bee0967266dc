"""File gateway service.

Translates upload, download and delete requests into calls on the object
store and turns the outcome into result objects or :class:`GatewayError`.
The service keeps no state between requests; the storage client it wraps is
constructed once at startup and shared read-only.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from starlette.concurrency import run_in_threadpool

from gateway.common.errors import (
    GatewayError,
    StorageOperation,
    map_storage_error,
)
from gateway.infra.observability.metrics import STORAGE_LATENCY, STORAGE_OPERATIONS
from gateway.infra.storage.client import StorageClient

DEFAULT_CONTENT_TYPE = "application/octet-stream"

logger = logging.getLogger("gateway.files")

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class FileUpload:
    """A file part received from the client."""

    filename: str | None
    content_type: str | None
    payload: bytes


@dataclass(frozen=True, slots=True)
class UploadResult:
    key: str
    content_type: str
    size_bytes: int


@dataclass(frozen=True, slots=True)
class DownloadResult:
    key: str
    content_type: str
    payload: bytes


@dataclass(frozen=True, slots=True)
class DeleteResult:
    key: str


def _first_non_empty(*values: str | None) -> str | None:
    for value in values:
        if value is not None and value.strip():
            return value
    return None


class FileGateway:
    """Stateless translator between file requests and the object store."""

    def __init__(self, storage: StorageClient, *, max_upload_bytes: int) -> None:
        self._storage = storage
        self._max_upload_bytes = max_upload_bytes

    @property
    def max_upload_bytes(self) -> int:
        return self._max_upload_bytes

    async def upload(
        self,
        upload: FileUpload | None,
        *,
        key: str | None = None,
        content_type: str | None = None,
    ) -> UploadResult:
        """Store the uploaded file, overwriting any object at the same key.

        Args:
            upload: The received file part, or None when the request had none.
            key: Explicit object key; defaults to the upload's file name.
            content_type: Explicit MIME type; defaults to the part's type.

        Returns:
            UploadResult describing what was stored.

        Raises:
            GatewayError: CLIENT_ERROR for a missing part, missing key or an
                oversized payload (the store is not contacted), SERVER_ERROR
                when the store rejects the write.
        """
        if upload is None:
            raise GatewayError.client_error("No file uploaded")

        object_key = _first_non_empty(key, upload.filename)
        if object_key is None:
            raise GatewayError.client_error("File name is required")

        size_bytes = len(upload.payload)
        if size_bytes > self._max_upload_bytes:
            raise GatewayError.client_error(
                f"File exceeds the maximum upload size of {self._max_upload_bytes} bytes"
            )

        resolved_type = (
            _first_non_empty(content_type, upload.content_type) or DEFAULT_CONTENT_TYPE
        )

        await self._call(
            StorageOperation.PUT,
            object_key,
            lambda: self._storage.put_object(
                object_key=object_key,
                payload=upload.payload,
                content_type=resolved_type,
            ),
        )
        logger.info(
            "file_uploaded key=%s size_bytes=%s content_type=%s",
            object_key,
            size_bytes,
            resolved_type,
            extra={
                "extra": {
                    "event": "file_uploaded",
                    "key": object_key,
                    "size_bytes": size_bytes,
                    "content_type": resolved_type,
                }
            },
        )
        return UploadResult(
            key=object_key, content_type=resolved_type, size_bytes=size_bytes
        )

    async def download(self, key: str) -> DownloadResult:
        """Fetch an object. Every storage failure is reported as NOT_FOUND."""
        stored = await self._call(
            StorageOperation.GET,
            key,
            lambda: self._storage.get_object(object_key=key),
        )
        return DownloadResult(
            key=key,
            content_type=stored.content_type or DEFAULT_CONTENT_TYPE,
            payload=stored.payload,
        )

    async def delete(self, key: str) -> DeleteResult:
        """Delete an object. Every storage failure is reported as SERVER_ERROR."""
        await self._call(
            StorageOperation.DELETE,
            key,
            lambda: self._storage.delete_object(object_key=key),
        )
        logger.info(
            "file_deleted key=%s",
            key,
            extra={"extra": {"event": "file_deleted", "key": key}},
        )
        return DeleteResult(key=key)

    async def _call(
        self, operation: StorageOperation, key: str, func: Callable[[], T]
    ) -> T:
        start = time.perf_counter()
        try:
            result = await run_in_threadpool(func)
        except Exception as exc:
            STORAGE_OPERATIONS.labels(operation.value, "error").inc()
            error = map_storage_error(exc, operation)
            self._log_failure(operation, key, error, exc)
            raise error from exc
        finally:
            STORAGE_LATENCY.labels(operation.value).observe(
                time.perf_counter() - start
            )
        STORAGE_OPERATIONS.labels(operation.value, "ok").inc()
        return result

    @staticmethod
    def _log_failure(
        operation: StorageOperation,
        key: str,
        error: GatewayError,
        exc: Exception,
    ) -> None:
        extra: dict[str, Any] = {
            "event": "storage_failure",
            "operation": operation.value,
            "key": key,
            "error_kind": error.kind.value,
            "storage_error": str(exc),
        }
        # reads fold every failure into not-found, so they only warn
        level = logging.WARNING if operation is StorageOperation.GET else logging.ERROR
        logger.log(
            level,
            "storage_failure operation=%s key=%s error_kind=%s storage_error=%s",
            operation.value,
            key,
            error.kind.value,
            exc,
            extra={"extra": extra},
        )
