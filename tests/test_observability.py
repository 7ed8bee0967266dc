from fastapi import FastAPI
from fastapi.testclient import TestClient

from gateway.infra.observability.metrics import metrics_app
from gateway.infra.observability.middleware import MetricsMiddleware


def build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(MetricsMiddleware)

    @app.get("/api/file/{key:path}")
    def get_file(key: str):
        return {"key": key}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.mount("/metrics", metrics_app)
    return app


def test_metrics_route_template_label():
    client = TestClient(build_app())
    resp = client.get("/api/file/reports/2024/q1.pdf")
    assert resp.status_code == 200

    metrics_text = client.get("/metrics").text
    assert "http_requests_total" in metrics_text
    assert 'route="/api/file/{key:path}"' in metrics_text
    assert "reports/2024" not in metrics_text


def test_latency_metric_present():
    client = TestClient(build_app())
    client.get("/api/file/a.txt")

    m = client.get("/metrics")
    assert m.status_code == 200
    assert "http_request_duration_seconds" in m.text


def test_storage_operation_metrics(client):
    client.post("/api/file/upload", files={"file": ("m.txt", b"m", "text/plain")})
    client.get("/api/file/does-not-exist")

    metrics_text = client.get("/metrics").text
    assert 'storage_operations_total{operation="put",outcome="ok"}' in metrics_text
    assert 'storage_operations_total{operation="get",outcome="error"}' in metrics_text
    assert "storage_operation_duration_seconds" in metrics_text


def test_request_id_propagation():
    client = TestClient(build_app())

    # auto-generate when missing
    r1 = client.get("/health")
    rid1 = r1.headers.get("X-Request-Id")
    assert rid1 is not None and len(rid1) > 0

    # echo when provided
    rid = "req-abc-123"
    r2 = client.get("/health", headers={"X-Request-Id": rid})
    assert r2.headers.get("X-Request-Id") == rid
