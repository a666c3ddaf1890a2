"""
Observability Module

Correlates structured logs with OpenTelemetry traces: request context,
X-Ray trace id translation, structured logging and the span interceptor.
"""

from .context import (
    RequestContext,
    get_context_dict,
    get_request_context,
    request_scope,
    reset_request_context,
    set_request_context,
)
from .trace_id import current_xray_trace_id, format_xray_trace_id, translate
from .logging import (
    HOSTNAME,
    LogEntry,
    LogLevel,
    LoggingSink,
    StructuredFormatter,
    StructuredLogger,
    TraceContextFilter,
    configure_logging,
    get_logger,
)
from .tracing import (
    get_tracer,
    init_tracing,
    set_span_attributes,
    shutdown_tracing,
    trace_operation,
    traced,
)

__all__ = [
    # Request context
    "RequestContext",
    "get_context_dict",
    "get_request_context",
    "request_scope",
    "reset_request_context",
    "set_request_context",
    # Trace id
    "current_xray_trace_id",
    "format_xray_trace_id",
    "translate",
    # Logging
    "HOSTNAME",
    "LogEntry",
    "LogLevel",
    "LoggingSink",
    "StructuredFormatter",
    "StructuredLogger",
    "TraceContextFilter",
    "configure_logging",
    "get_logger",
    # Tracing
    "get_tracer",
    "init_tracing",
    "set_span_attributes",
    "shutdown_tracing",
    "trace_operation",
    "traced",
]
