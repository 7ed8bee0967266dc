import json
import logging
import re
import time
import uuid
from typing import Any

from fastapi import Request
from starlette.concurrency import iterate_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from gateway.common.config import get_settings
from gateway.infra.observability.metrics import LATENCY, REQUESTS

TRACE_BODY_LIMIT = 2048
TRACEABLE_MEDIA_TYPES = ("application/json", "application/problem+json")

_SECRET_PATTERNS = (
    re.compile(r"(?i)authorization\s*:\s*bearer\s+[A-Za-z0-9\-_.]+"),
    re.compile(
        r"(?i)(token|secret|api_key|x-api-key|password|authorization)\s*[:=]\s*[^\s]+"
    ),
)


def _is_traceable(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type in TRACEABLE_MEDIA_TYPES


def _truncate(text: str) -> str:
    if len(text) > TRACE_BODY_LIMIT:
        return text[:TRACE_BODY_LIMIT] + "...<truncated>"
    return text


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records Prometheus metrics and one structured log line per request.

    File payloads are never traced; with ``TRACE_HTTP`` enabled only JSON
    bodies (success and error envelopes) are logged, with secrets masked.
    """

    SENSITIVE_KEYS = {
        "password",
        "passwd",
        "pwd",
        "secret",
        "token",
        "access_token",
        "refresh_token",
        "api_key",
        "x-api-key",
        "authorization",
    }

    def _mask_mapping(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            masked: dict[str, Any] = {}
            for k, v in obj.items():
                if isinstance(k, str) and k.lower() in self.SENSITIVE_KEYS:
                    masked[k] = "***"
                else:
                    masked[k] = self._mask_mapping(v)
            return masked
        if isinstance(obj, list):
            return [self._mask_mapping(x) for x in obj]
        return obj

    def _mask_text(self, text: str) -> str:
        masked = text
        for pattern in _SECRET_PATTERNS:
            masked = pattern.sub(
                lambda m: m.group(0).split(":")[0].split("=")[0] + ": ***",
                masked,
            )
        return masked

    def _render_body(self, raw: bytes) -> str:
        decoded = raw.decode("utf-8", errors="replace")
        try:
            parsed = json.loads(decoded)
        except ValueError:
            return _truncate(self._mask_text(decoded))
        return _truncate(json.dumps(self._mask_mapping(parsed), ensure_ascii=False))

    @staticmethod
    def _client_ip(request: Request) -> str | None:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        if request.client:
            return request.client.host
        return None

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        client_ip = self._client_ip(request)
        user_id = request.headers.get("X-User-Id") or "<missing>"
        logger = logging.getLogger("http")

        trace_http = get_settings().TRACE_HTTP
        request_body: str | None = None
        if trace_http and _is_traceable(request.headers.get("Content-Type")):
            raw_body = await request.body()
            if raw_body:
                request_body = self._render_body(raw_body)

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed = time.perf_counter() - start
            logger.exception(
                "request_error method=%s route=%s status=%s duration_ms=%.3f "
                "request_id=%s user_id=%s client_ip=%s",
                request.method,
                request.url.path,
                500,
                round(elapsed * 1000, 3),
                request_id,
                user_id,
                client_ip or "-",
                extra={
                    "extra": {
                        "method": request.method,
                        "route": request.url.path,
                        "status": 500,
                        "duration_ms": round(elapsed * 1000, 3),
                        "request_id": request_id,
                        "user_id": user_id,
                        "client_ip": client_ip,
                        "exception": repr(exc),
                    }
                },
            )
            raise

        elapsed = time.perf_counter() - start
        status_code = response.status_code

        route_template = request.scope.get("route", None)
        if route_template and hasattr(route_template, "path"):
            route = route_template.path
        else:
            route = request.url.path

        REQUESTS.labels(request.method, route, str(status_code)).inc()
        LATENCY.labels(request.method, route).observe(elapsed)

        if "X-Request-Id" not in response.headers:
            response.headers["X-Request-Id"] = request_id

        response_body: str | None = None
        if trace_http and _is_traceable(response.headers.get("Content-Type")):
            chunks = [chunk async for chunk in response.body_iterator]
            raw_response = b"".join(chunks)
            response.body_iterator = iterate_in_threadpool(iter([raw_response]))
            if raw_response:
                response_body = self._render_body(raw_response)

        level = logging.INFO
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING

        duration_ms = round(elapsed * 1000, 3)
        extra_payload: dict[str, Any] = {
            "method": request.method,
            "route": route,
            "path": request.url.path,
            "status": status_code,
            "duration_ms": duration_ms,
            "request_id": request_id,
            "user_id": user_id,
            "client_ip": client_ip,
            "user_agent": request.headers.get("User-Agent"),
        }
        if trace_http:
            extra_payload["request_body"] = request_body
            extra_payload["response_body"] = response_body

        logger.log(
            level,
            "request method=%s route=%s status=%s duration_ms=%.3f "
            "request_id=%s user_id=%s client_ip=%s user_agent=%s",
            request.method,
            route,
            status_code,
            duration_ms,
            request_id,
            user_id,
            client_ip or "-",
            request.headers.get("User-Agent") or "-",
            extra={"extra": extra_payload},
        )
        return response
