"""
X-Ray Trace ID Translation

Converts OpenTelemetry trace identifiers into the composite format
expected by AWS X-Ray: "<flags>-<first 8 hex chars>-<remaining hex chars>".
"""

from typing import Optional

from opentelemetry import trace
from opentelemetry.trace import Span


def format_xray_trace_id(trace_id_hex: Optional[str], trace_flags: int) -> Optional[str]:
    """
    Build the X-Ray composite id from a hex trace id and its flags.

    Ids shorter than 8 characters are split the same way and yield an
    empty last segment; X-Ray backends receive that value unchanged.

    Args:
        trace_id_hex: Native trace id as a hex string
        trace_flags: Trace flags byte (1 when sampled)

    Returns:
        Composite trace id, or None when there is no trace id
    """
    if not trace_id_hex:
        return None
    return f"{int(trace_flags)}-{trace_id_hex[:8]}-{trace_id_hex[8:]}"


def translate(span: Optional[Span]) -> Optional[str]:
    """
    X-Ray trace id of `span`, or None if it carries no valid trace.

    `trace.get_current_span()` returns INVALID_SPAN when nothing is active,
    so an invalid span context is treated as "no active span".
    """
    if span is None:
        return None
    span_context = span.get_span_context()
    if span_context is None or not span_context.is_valid:
        return None
    return format_xray_trace_id(format(span_context.trace_id, "032x"), span_context.trace_flags)


def current_xray_trace_id() -> Optional[str]:
    """X-Ray trace id of the currently active span."""
    return translate(trace.get_current_span())
