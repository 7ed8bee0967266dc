from prometheus_client import Counter, Histogram, make_asgi_app

# Route templates such as /api/file/{key:path} keep label cardinality low
REQUESTS = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status"],
)

LATENCY = Histogram(
    "http_request_duration_seconds",
    "Request latency in seconds",
    ["method", "route"],
)

STORAGE_OPERATIONS = Counter(
    "storage_operations_total",
    "Object store calls made by the gateway",
    ["operation", "outcome"],
)

STORAGE_LATENCY = Histogram(
    "storage_operation_duration_seconds",
    "Object store call latency in seconds",
    ["operation"],
)

metrics_app = make_asgi_app()
