"""
Request Boundary Middleware

Provides the HTTP entry points of the correlation layer:
- Request context population (url, method, request id, user)
- OpenTelemetry server spans for inbound requests
"""

from .request_context import (
    REQUEST_ID_HEADER,
    RequestContextMiddleware,
    build_request_context,
)
from .tracing import TRACE_ID_HEADER, TracingMiddleware

__all__ = [
    # Request context
    "REQUEST_ID_HEADER",
    "RequestContextMiddleware",
    "build_request_context",
    # OpenTelemetry Tracing
    "TRACE_ID_HEADER",
    "TracingMiddleware",
]
