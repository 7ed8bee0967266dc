import logging

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from gateway.api.deps import get_storage_client, require_api_key
from gateway.api.routers.files import router as files_router
from gateway.common.config import get_settings
from gateway.common.errors import INTERNAL_ERROR_MESSAGE, ErrorKind, GatewayError
from gateway.common.logging import setup_logging
from gateway.infra.observability.metrics import metrics_app
from gateway.infra.observability.middleware import MetricsMiddleware
from gateway.infra.storage import StorageClient, StorageError, build_storage_client

ERROR_CODE_BY_STATUS = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    413: "payload_too_large",
    415: "unsupported_media_type",
    500: "internal_error",
    503: "service_unavailable",
}


def _normalize_detail(detail):
    if isinstance(detail, dict):
        maybe_code = detail.get("error_code")
        cleaned = {k: v for k, v in detail.items() if k != "error_code"}
        if len(cleaned) == 1 and "message" in cleaned:
            cleaned = cleaned["message"]
        if not cleaned:
            cleaned = None
        return cleaned, maybe_code if isinstance(maybe_code, str) else None
    return detail, None


def _resolve_error_code(status_code: int, override: str | None = None) -> str:
    if override:
        return override
    if status_code == 422:
        return "validation_error"
    return ERROR_CODE_BY_STATUS.get(status_code, "unknown_error")


def _error_response(
    request: Request,
    *,
    status_code: int,
    title: str,
    error: str,
    error_code: str,
    detail=None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        media_type="application/problem+json",
        headers=headers,
        content={
            "type": "about:blank",
            "title": title,
            "status": status_code,
            "error": error,
            "detail": error if detail is None else detail,
            "error_code": error_code,
            "instance": str(request.url),
            "request_id": request.headers.get("X-Request-Id"),
        },
    )


def create_app(*, storage_client: StorageClient | None = None) -> FastAPI:
    """Build the gateway application.

    ``storage_client`` is used as-is when given; otherwise the client is built
    from settings once, at startup, and shared by every request.
    """
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    app = FastAPI(
        title="File Gateway",
        version="1.0.0",
        description="Upload, download and delete files held in object storage.",
    )
    app.state.storage_client = storage_client

    # Optional CORS
    if settings.CORS_ENABLED:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS or ["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(
        files_router,
        prefix=settings.API_PREFIX,
        tags=["files"],
        dependencies=[Depends(require_api_key)],
    )

    # Metrics
    if settings.ENABLE_METRICS:
        app.add_middleware(MetricsMiddleware)
        app.mount("/metrics", metrics_app)

    @app.on_event("startup")
    def on_startup() -> None:
        startup_logger = logging.getLogger("gateway.startup")
        if app.state.storage_client is None:
            app.state.storage_client = build_storage_client(settings)
        startup_logger.info(
            "Object storage client ready. [event=storage_ready] (backend=%s, bucket=%s, endpoint=%s)",
            settings.STORAGE_BACKEND,
            app.state.storage_client.bucket,
            settings.S3_ENDPOINT_URL or "<default>",
        )

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        logger = logging.getLogger("http")
        logger.log(
            logging.ERROR if exc.kind is ErrorKind.SERVER_ERROR else logging.WARNING,
            "gateway_error kind=%s message=%s method=%s path=%s request_id=%s",
            exc.kind.value,
            exc.message,
            request.method,
            request.url.path,
            request.headers.get("X-Request-Id"),
            extra={
                "extra": {
                    "kind": exc.kind.value,
                    "status": exc.status_code,
                    "detail": exc.message,
                    "method": request.method,
                    "route": request.url.path,
                    "request_id": request.headers.get("X-Request-Id"),
                }
            },
        )
        return _error_response(
            request,
            status_code=exc.status_code,
            title="Gateway Error",
            error=exc.message,
            error_code=exc.kind.value,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger = logging.getLogger("http")
        normalized_detail, code_override = _normalize_detail(exc.detail)
        logger.log(
            logging.WARNING if exc.status_code < 500 else logging.ERROR,
            "http_exception status=%s detail=%s method=%s path=%s request_id=%s",
            exc.status_code,
            normalized_detail,
            request.method,
            request.url.path,
            request.headers.get("X-Request-Id"),
            extra={
                "extra": {
                    "status": exc.status_code,
                    "detail": normalized_detail,
                    "method": request.method,
                    "route": request.url.path,
                    "request_id": request.headers.get("X-Request-Id"),
                }
            },
        )
        return _error_response(
            request,
            status_code=exc.status_code,
            title="HTTP Error",
            error=str(normalized_detail) if normalized_detail is not None else "",
            error_code=_resolve_error_code(exc.status_code, code_override),
            detail=normalized_detail,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        return _error_response(
            request,
            status_code=422,
            title="Validation Error",
            error="Request validation failed",
            error_code=_resolve_error_code(422),
            detail=jsonable_encoder(exc.errors()),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logging.getLogger("http").error(
            "unhandled_exception method=%s path=%s error=%r",
            request.method,
            request.url.path,
            exc,
        )
        return _error_response(
            request,
            status_code=500,
            title="Internal Server Error",
            error=INTERNAL_ERROR_MESSAGE,
            error_code=ErrorKind.SERVER_ERROR.value,
        )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/ready")
    async def ready(storage: StorageClient = Depends(get_storage_client)):
        try:
            await run_in_threadpool(storage.check_bucket)
        except StorageError as exc:
            return {
                "status": "not_ready",
                "detail": {"storage": str(exc), "bucket": storage.bucket},
            }
        return {"status": "ready", "bucket": storage.bucket}

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "gateway.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
    )


if __name__ == "__main__":
    run()
