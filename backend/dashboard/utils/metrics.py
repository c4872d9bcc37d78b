"""
Prometheus metrics definitions for the API and storage clients.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Storage backend metrics
storage_requests_total = Counter(
    'storage_requests_total',
    'Total storage backend requests',
    ['backend', 'operation']
)

storage_failures_total = Counter(
    'storage_failures_total',
    'Total storage backend failures',
    ['backend', 'operation']
)

storage_latency_seconds = Histogram(
    'storage_latency_seconds',
    'Storage backend request latency in seconds',
    ['backend', 'operation'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0]
)

# Upload workflow metrics
upload_workflows_total = Counter(
    'upload_workflows_total',
    'Total upload workflows by outcome',
    ['outcome']
)
