from prometheus_client import Counter, Histogram, Gauge

# http request metrics
http_requests_total = Counter(
    "app_http_requests_total",
    "Total HTTP requests count",
    ["method", "endpoint", "status_code"],
)

http_request_duration = Histogram(
    "app_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
)

active_requests = Gauge("app_active_requests", "Number of active HTTP requests")

# cache metrics
cache_hits = Counter("app_cache_hits_total", "Cache hits", ["cache_type"])

cache_misses = Counter("app_cache_misses_total", "Cache misses", ["cache_type"])

# conditional request outcomes: not_modified, modified, unconditional
conditional_requests_total = Counter(
    "app_conditional_requests_total",
    "Requests handled by the ETag interceptor",
    ["outcome"],
)
