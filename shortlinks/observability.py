from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import re
import time

# Metrics definitions
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"]
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

REDIRECT_TOTAL = Counter("redirect_total", "Total redirects")
REDIRECT_404_TOTAL = Counter("redirect_404_total", "Total failed redirects (404)")
REDIRECT_410_TOTAL = Counter("redirect_410_total", "Total redirects to expired links (410)")
CLICK_RECORD_FAILURES = Counter("click_record_failures_total", "Clicks that could not be recorded")
LINKS_CREATED_TOTAL = Counter("links_created_total", "Total links created")
RATE_LIMITED_TOTAL = Counter("rate_limited_total", "Total rate limited requests")

_URL_ID_PATH = re.compile(r"^/api/urls/\d+(/stats)?$")


def metric_path_for(path: str) -> str:
    # Short codes and ids would blow up label cardinality
    match = _URL_ID_PATH.match(path)
    if match:
        return "/api/urls/{id}" + (match.group(1) or "")
    if path.startswith("/api/") or path in ("/metrics", "/health", "/"):
        return path
    if len(path) > 1 and "/" not in path[1:]:  # Root redirect /{code}
        return "/{code}"
    return "other"


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time

        status_code = str(response.status_code)
        method = request.method
        metric_path = metric_path_for(request.url.path)

        HTTP_REQUESTS_TOTAL.labels(method=method, path=metric_path, status=status_code).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=method, path=metric_path).observe(process_time)

        return response

def metrics_endpoint(request: Request):
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
