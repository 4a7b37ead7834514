"""Prometheus metrics for monitoring"""
import time
from functools import wraps
from typing import Callable

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

upstream_requests = Counter(
    'hostaway_requests_total',
    'Total calls made to the Hostaway API',
    ['operation', 'status'],
    registry=registry
)

upstream_duration = Histogram(
    'hostaway_request_duration_seconds',
    'Hostaway API call duration in seconds',
    ['operation'],
    registry=registry
)

quotes_computed = Counter(
    'quotes_computed_total',
    'Total price quotes computed',
    ['policy'],
    registry=registry
)


def track_upstream(operation: str):
    """Decorator recording count and latency of an upstream call.

    The wrapped coroutine must return an ``httpx.Response``.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                response = await func(*args, **kwargs)
            except Exception:
                upstream_requests.labels(operation=operation, status='error').inc()
                upstream_duration.labels(operation=operation).observe(time.time() - start_time)
                raise
            upstream_requests.labels(operation=operation, status=response.status_code).inc()
            upstream_duration.labels(operation=operation).observe(time.time() - start_time)
            return response
        return wrapper
    return decorator


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    return generate_latest(registry).decode('utf-8')
