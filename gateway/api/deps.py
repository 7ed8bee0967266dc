from __future__ import annotations

import hmac
import logging

from fastapi import Depends, Header, HTTPException, Request

from gateway.common.config import get_settings
from gateway.infra.storage.client import StorageClient
from gateway.services.file_gateway import FileGateway

logger = logging.getLogger("http")


def get_storage_client(request: Request) -> StorageClient:
    storage = getattr(request.app.state, "storage_client", None)
    if storage is None:
        raise HTTPException(
            status_code=503,
            detail={
                "message": "Object storage is not configured",
                "error_code": "storage_unavailable",
            },
        )
    return storage


def get_file_gateway(
    storage: StorageClient = Depends(get_storage_client),
) -> FileGateway:
    settings = get_settings()
    return FileGateway(storage, max_upload_bytes=settings.STORAGE_MAX_UPLOAD_BYTES)


def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
    settings = get_settings()
    if not settings.API_KEY_ENABLED:
        return
    expected = settings.API_KEY
    if not x_api_key or (
        expected and not hmac.compare_digest(x_api_key.encode(), expected.encode())
    ):
        preview = f"{x_api_key[:4]}***" if x_api_key else "<missing>"
        logger.warning("api_key_rejected api_key_preview=%s", preview)
        raise HTTPException(status_code=401, detail="Invalid API key")
