"""Custom middleware for the lead capture service."""

import time

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from lead_capture.observability.logging.correlation import (
    CorrelationContext,
    generate_correlation_id,
)
from lead_capture.observability.metrics.collectors import MetricsCollector

logger = structlog.get_logger()

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Middleware to add correlation IDs to requests and responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Add correlation ID to request, log context and response."""
        correlation_id = request.headers.get(CORRELATION_HEADER) or (
            generate_correlation_id()
        )
        request.state.correlation_id = correlation_id

        with CorrelationContext(correlation_id):
            response = await call_next(request)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log request details."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Log request details."""
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        logger.info(
            "Request processed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=process_time,
            correlation_id=getattr(request.state, "correlation_id", None),
        )

        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    def __init__(self, app: ASGIApp, metrics_collector: MetricsCollector) -> None:
        super().__init__(app)
        self.metrics_collector = metrics_collector

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.time()
        status_code = "500"

        try:
            response = await call_next(request)
            status_code = str(response.status_code)
            return response
        finally:
            duration = time.time() - start_time
            self.metrics_collector.http_requests_total.labels(
                method=request.method,
                endpoint=request.url.path,
                status_code=status_code,
            ).inc()
            self.metrics_collector.http_request_duration_seconds.labels(
                method=request.method, endpoint=request.url.path
            ).observe(duration)
