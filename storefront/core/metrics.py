"""
Prometheus metrics configuration.
"""

import re
import time
from functools import wraps
from typing import Any, Callable, TypeVar, cast

from fastapi import FastAPI, Request, Response
from loguru import logger
from prometheus_client import REGISTRY, Counter, Gauge, Histogram
from prometheus_client.openmetrics.exposition import (
    CONTENT_TYPE_LATEST,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

F = TypeVar("F", bound=Callable[..., Any])

_UUID_SEGMENT = re.compile(r"/[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}(?=/|$)")

# Define metrics
REQUEST_COUNT = Counter("http_requests_total", "Total HTTP requests count", ["method", "endpoint", "status_code"])

REQUEST_TIME = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0, float("inf")),
)

REQUEST_IN_PROGRESS = Gauge("http_requests_in_progress", "Number of HTTP requests in progress", ["method", "endpoint"])

EXCEPTION_COUNT = Counter(
    "http_exceptions_total", "Total HTTP exceptions count", ["method", "endpoint", "exception_type"]
)

REDIS_OPERATIONS = Counter("redis_operations_total", "Total Redis operations", ["operation"])

REDIS_OPERATION_TIME = Histogram(
    "redis_operation_duration_seconds",
    "Redis operation duration in seconds",
    ["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, float("inf")),
)

UPSTREAM_REQUESTS = Counter(
    "gateway_upstream_requests_total", "Requests forwarded by the gateway", ["service", "status_code"]
)

BUSINESS_EVENTS = Counter("business_events_total", "Total business events", ["event_type"])


def normalize_path(path: str) -> str:
    """Replace UUID path segments with ``{id}`` to keep label cardinality low."""
    return _UUID_SEGMENT.sub("/{id}", path)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware that collects Prometheus metrics for HTTP requests.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        method = request.method
        path = request.url.path

        if path == "/metrics":
            return cast(Response, await call_next(request))

        path = normalize_path(path)
        start_time = time.time()
        REQUEST_IN_PROGRESS.labels(method=method, endpoint=path).inc()

        try:
            response = cast(Response, await call_next(request))
            REQUEST_COUNT.labels(method=method, endpoint=path, status_code=response.status_code).inc()
            REQUEST_TIME.labels(method=method, endpoint=path).observe(time.time() - start_time)
            return response
        except Exception as e:
            EXCEPTION_COUNT.labels(method=method, endpoint=path, exception_type=type(e).__name__).inc()
            logger.exception(f"Request failed: {str(e)}")
            raise
        finally:
            REQUEST_IN_PROGRESS.labels(method=method, endpoint=path).dec()


async def metrics_endpoint(request: Request) -> Response:
    """
    Endpoint for exposing Prometheus metrics.
    """
    data = generate_latest(REGISTRY)
    return Response(content=data, headers={"Content-Type": CONTENT_TYPE_LATEST})


def setup_metrics(app: FastAPI) -> None:
    """
    Set up Prometheus metrics and middleware for FastAPI application.
    """
    app.add_middleware(PrometheusMiddleware)
    app.add_route("/metrics", metrics_endpoint)

    logger.info("Prometheus metrics configured")


def record_business_event(event_type: str) -> None:
    """Record a business event metric."""
    BUSINESS_EVENTS.labels(event_type=event_type).inc()


def record_upstream_response(service: str, status_code: int) -> None:
    UPSTREAM_REQUESTS.labels(service=service, status_code=status_code).inc()


def time_redis_operation(operation: str) -> Callable[[F], F]:
    """Decorator to time Redis operations."""

    def decorator(func: F) -> F:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.time()
            try:
                result = await func(*args, **kwargs)
                REDIS_OPERATIONS.labels(operation=operation).inc()
                return result
            finally:
                REDIS_OPERATION_TIME.labels(operation=operation).observe(time.time() - start_time)

        return cast(F, wrapper)

    return decorator
