"""
HTTP middleware for the PASSAGE API.

Provides:
- Request ID propagation (X-Request-ID) through a context variable
- Structured JSON request logs carrying that ID
- Sanitized 500 responses for unhandled errors
- In-memory request and optimization metrics, exported as Prometheus text
- Baseline security headers
"""
import json
import logging
import re
import threading
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Health checks and scrapes are excluded from logs and metrics
QUIET_PATHS = {"/api/health", "/api/health/live", "/api/metrics"}


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return request_id_ctx.get()


class StructuredLogger:
    """
    JSON-lines logger.

    Each record carries timestamp, level, service and request_id so log
    aggregation can correlate a request across its log lines.
    """

    def __init__(self, name: str, service: str = "passage-api"):
        self.logger = logging.getLogger(name)
        self.service = service

    def _log(self, level: str, message: str, **kwargs):
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "message": message,
            "service": self.service,
            "request_id": get_request_id(),
            **kwargs
        }
        entry = {k: v for k, v in entry.items() if v is not None}
        self.logger.log(getattr(logging, level), json.dumps(entry, default=str))

    def info(self, message: str, **kwargs):
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log("ERROR", message, **kwargs)


structured_logger = StructuredLogger("passage.requests")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """JSON-only API: no framing, no sniffing, no referrer leakage."""

    def __init__(self, app, enable_hsts: bool = False):
        super().__init__(app)
        self.enable_hsts = enable_hsts

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if self.enable_hsts:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Accept the caller's X-Request-ID or mint one, and echo it back."""

    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid.uuid4())
        token = request_id_ctx.set(request_id)
        try:
            response = await call_next(request)
            response.headers[self.HEADER_NAME] = request_id
            return response
        finally:
            request_id_ctx.reset(token)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One structured log line per request with status and duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        try:
            response = await call_next(request)
        except Exception as e:
            structured_logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
                client_ip=client_ip,
            )
            raise

        structured_logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            client_ip=client_ip,
        )
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Turn unhandled exceptions into a 500 JSON body with the request ID.

    Details are only echoed back in debug mode.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            request_id = get_request_id()
            structured_logger.error(
                "Unhandled exception",
                error=str(e),
                error_type=type(e).__name__,
                path=request.url.path,
                method=request.method,
            )
            detail = str(e) if self.debug else (
                "An internal error occurred. Please contact support with the request ID."
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal Server Error",
                    "detail": detail,
                    "request_id": request_id,
                },
                headers={"X-Request-ID": request_id} if request_id else {},
            )


class MetricsCollector:
    """
    In-memory counters for requests and optimization outcomes.

    Keys are (method, normalized path, status) for requests and the
    recommendation value for optimizations.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self):
        """Zero every counter and restart the uptime clock."""
        self.request_count: Dict[tuple, int] = {}
        self.request_duration_sum: Dict[tuple, float] = {}
        self.error_count: Dict[tuple, int] = {}
        self.optimizations: Dict[str, int] = {}
        self.optimization_seconds_sum = 0.0
        self.start_time = time.monotonic()

    @staticmethod
    def _normalize_path(path: str) -> str:
        return re.sub(r'/\d+(?=/|$)', '/{id}', path)

    def record_request(self, method: str, path: str, status_code: int, duration_seconds: float):
        key = (method, self._normalize_path(path), str(status_code))
        with self._lock:
            self.request_count[key] = self.request_count.get(key, 0) + 1
            self.request_duration_sum[key] = self.request_duration_sum.get(key, 0.0) + duration_seconds
            if status_code >= 500:
                self.error_count[key[:2]] = self.error_count.get(key[:2], 0) + 1

    def record_optimization(self, recommendation: str, duration_seconds: float):
        with self._lock:
            self.optimizations[recommendation] = self.optimizations.get(recommendation, 0) + 1
            self.optimization_seconds_sum += duration_seconds

    def get_metrics(self) -> dict:
        with self._lock:
            return {
                "uptime_seconds": round(time.monotonic() - self.start_time, 3),
                "requests": {
                    "total": sum(self.request_count.values()),
                    "by_endpoint": {":".join(k): v for k, v in self.request_count.items()},
                },
                "errors": {
                    "total": sum(self.error_count.values()),
                    "by_endpoint": {":".join(k): v for k, v in self.error_count.items()},
                },
                "optimizations": {
                    "total": sum(self.optimizations.values()),
                    "by_recommendation": dict(self.optimizations),
                    "seconds_sum": round(self.optimization_seconds_sum, 4),
                },
            }

    def get_prometheus_metrics(self) -> str:
        with self._lock:
            lines = [
                "# HELP passage_uptime_seconds Time since service start",
                "# TYPE passage_uptime_seconds gauge",
                f"passage_uptime_seconds {time.monotonic() - self.start_time}",
                "# HELP passage_requests_total Total request count",
                "# TYPE passage_requests_total counter",
            ]
            for (method, path, status), count in self.request_count.items():
                labels = f'method="{method}",path="{path}",status="{status}"'
                lines.append(f"passage_requests_total{{{labels}}} {count}")

            lines += [
                "# HELP passage_request_duration_seconds Request duration",
                "# TYPE passage_request_duration_seconds summary",
            ]
            for key, total in self.request_duration_sum.items():
                labels = 'method="{}",path="{}",status="{}"'.format(*key)
                lines.append(f"passage_request_duration_seconds_sum{{{labels}}} {total}")
                lines.append(f"passage_request_duration_seconds_count{{{labels}}} {self.request_count[key]}")

            lines += [
                "# HELP passage_errors_total Responses with status >= 500",
                "# TYPE passage_errors_total counter",
            ]
            for (method, path), count in self.error_count.items():
                lines.append(f'passage_errors_total{{method="{method}",path="{path}"}} {count}')

            lines += [
                "# HELP passage_optimizations_total Route optimizations by recommendation",
                "# TYPE passage_optimizations_total counter",
            ]
            for recommendation, count in self.optimizations.items():
                lines.append(
                    f'passage_optimizations_total{{recommendation="{recommendation}"}} {count}'
                )
            return "\n".join(lines) + "\n"


metrics_collector = MetricsCollector()


class MetricsMiddleware(BaseHTTPMiddleware):
    """Feeds request timings to the metrics collector."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        metrics_collector.record_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_seconds=time.perf_counter() - start,
        )
        return response


def setup_middleware(app: FastAPI, debug: bool = False, enable_hsts: bool = False):
    """
    Install the middleware stack.

    Middleware runs in reverse order of addition, so errors are caught
    outermost and the request ID is set before logging sees the request.
    """
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=enable_hsts)
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)
