"""Prometheus metrics shared across the application"""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "jobportal_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "jobportal_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
AUTH_EVENTS = Counter(
    "jobportal_auth_events_total",
    "Authentication operations by outcome",
    ["event", "outcome"],
)
TOKEN_REJECTIONS = Counter(
    "jobportal_token_rejections_total",
    "Rejected tokens by type and cause",
    ["token_type", "reason"],
)
