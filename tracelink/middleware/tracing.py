"""
OpenTelemetry Tracing Middleware

FastAPI middleware that opens a server span for every request, so spans
created by intercepted operations nest under it.
"""

import logging
from typing import Callable, Iterable, Optional

from fastapi import Request, Response
from opentelemetry import trace
from opentelemetry.propagate import extract
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..config import config
from ..observability.trace_id import translate
from ..observability.tracing import get_tracer, set_span_attributes

logger = logging.getLogger(__name__)

TRACE_ID_HEADER = "X-Trace-ID"


class TracingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that creates OpenTelemetry spans for HTTP requests.

    Features:
    - Extracts upstream trace context (X-Amzn-Trace-Id once tracing is initialized)
    - Creates request span
    - Adds standard HTTP attributes
    - Skips health check requests
    - Returns the X-Ray trace id in the X-Trace-ID response header
    """

    def __init__(self, app: ASGIApp, excluded_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        if excluded_paths is None:
            excluded_paths = [config.HEALTH_CHECK_PATH]
        self.excluded_paths = frozenset(excluded_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip tracing for health endpoints
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        # Extract trace context from headers
        context = extract(dict(request.headers))

        tracer = get_tracer()

        # Create span for request
        with tracer.start_as_current_span(
            f"{request.method} {request.url.path}",
            context=context,
            kind=trace.SpanKind.SERVER,
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            set_span_attributes(
                span,
                **{
                    "http.method": request.method,
                    "http.url": str(request.url),
                    "http.route": request.url.path,
                    "http.scheme": request.url.scheme,
                    "http.host": request.url.hostname,
                    "http.user_agent": request.headers.get("user-agent"),
                }
            )

            try:
                response = await call_next(request)
            except Exception as e:
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                span.record_exception(e)
                logger.error(f"Request failed: {request.method} {request.url.path}: {e}")
                raise

            span.set_attribute("http.status_code", response.status_code)
            if response.status_code >= 500:
                span.set_status(trace.Status(trace.StatusCode.ERROR))

            xray_trace_id = translate(span)
            if xray_trace_id:
                response.headers[TRACE_ID_HEADER] = xray_trace_id

            return response
