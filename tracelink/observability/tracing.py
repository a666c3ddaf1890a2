"""
OpenTelemetry Tracing

Tracer setup for AWS X-Ray compatible traces, plus the span interceptor
that wraps operations in an active span with lifecycle logging.
"""

import inspect
import logging
from functools import wraps
from typing import Any, Awaitable, Callable, Iterable, Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.aws import AwsXRayPropagator
from opentelemetry.sdk.extension.aws.trace import AwsXRayIdGenerator
from opentelemetry.sdk.resources import Resource, SERVICE_NAME, SERVICE_VERSION
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Span, SpanKind, Status, StatusCode

from .logging import StructuredLogger

logger = logging.getLogger(__name__)

# Lifecycle lines for intercepted operations
span_logger = StructuredLogger(__name__)

SPAN_START_EVENT = "span_start"
SPAN_END_EVENT = "span_end"

# Global tracer
_tracer: Optional[trace.Tracer] = None
_provider: Optional[TracerProvider] = None


def init_tracing(
    service_name: str = "tracelink",
    service_version: str = "0.1.0",
    otlp_endpoint: Optional[str] = None,
    console_export: bool = False,
    span_processors: Optional[Iterable[SpanProcessor]] = None
) -> trace.Tracer:
    """
    Initialize OpenTelemetry tracing with X-Ray trace ids and propagation.

    Args:
        service_name: Name of the service
        service_version: Version of the service
        otlp_endpoint: OTLP exporter endpoint (e.g., "http://localhost:4317")
        console_export: Enable console export for debugging
        span_processors: Additional span processors to register

    Returns:
        Configured tracer
    """
    global _tracer, _provider

    # Create resource
    resource = Resource.create({
        SERVICE_NAME: service_name,
        SERVICE_VERSION: service_version,
    })

    # X-Ray requires the first 8 hex chars of the trace id to be the epoch start time
    provider = TracerProvider(resource=resource, id_generator=AwsXRayIdGenerator())

    # Add exporters
    if otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
        logger.info(f"OTel tracing: OTLP exporter configured -> {otlp_endpoint}")

    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        logger.info("OTel tracing: Console exporter enabled")

    for processor in span_processors or ():
        provider.add_span_processor(processor)

    # Set global tracer provider
    trace.set_tracer_provider(provider)

    # Propagate context with X-Amzn-Trace-Id headers
    set_global_textmap(AwsXRayPropagator())

    _provider = provider
    _tracer = provider.get_tracer(service_name, service_version)

    logger.info(f"OTel tracing initialized: {service_name} v{service_version}")

    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the global tracer."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("tracelink")
    return _tracer


def shutdown_tracing() -> None:
    """Flush pending spans and shut down the provider created by init_tracing."""
    global _tracer, _provider
    if _provider is None:
        return
    _provider.shutdown()
    logger.info("OTel tracing shut down")
    _provider = None
    _tracer = None


def trace_operation(
    name: str,
    operation: Callable,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    logger: Optional[StructuredLogger] = None
) -> Callable:
    """
    Wrap `operation` so each call runs inside its own active span.

    The wrapper has the same signature and result/failure contract as
    `operation`. Per call it:
    - starts span `name` as the current span (child of any active span)
    - logs `span_start`, runs the operation
    - sets status OK, or ERROR with the failure message plus an error log
    - logs `span_end` and ends the span, on every exit path

    Failures are re-raised unchanged. Plain callables that return an
    awaitable (lambdas, objects with an async __call__) keep the span open
    until that awaitable settles.

    Usage:
        fetch = trace_operation("UserRepository.fetch", repository.fetch)
        user = await fetch(user_id)
    """
    log = logger or span_logger

    def start_span():
        # Status is set here exactly once, so the SDK must not set it too
        return get_tracer().start_as_current_span(
            name,
            kind=kind,
            record_exception=False,
            set_status_on_exception=False,
            end_on_exit=False,
        )

    def succeed(span: Span) -> None:
        span.set_status(Status(StatusCode.OK))

    def fail(span: Span, error: BaseException) -> None:
        span.set_status(Status(StatusCode.ERROR, str(error) or type(error).__name__))
        log.error(error, source=name)

    def finish(span: Span) -> None:
        log.info(f"{name} span ended", source=name, event=SPAN_END_EVENT)
        span.end()

    async def settle(span: Span, awaitable: Awaitable) -> Any:
        with trace.use_span(
            span,
            end_on_exit=False,
            record_exception=False,
            set_status_on_exception=False,
        ):
            try:
                result = await awaitable
            except BaseException as e:
                fail(span, e)
                raise
            else:
                succeed(span)
                return result
            finally:
                finish(span)

    @wraps(operation)
    async def async_wrapper(*args, **kwargs):
        with start_span() as span:
            log.info(f"{name} span started", source=name, event=SPAN_START_EVENT)
            try:
                result = await operation(*args, **kwargs)
            except BaseException as e:
                fail(span, e)
                raise
            else:
                succeed(span)
                return result
            finally:
                finish(span)

    @wraps(operation)
    def sync_wrapper(*args, **kwargs):
        with start_span() as span:
            log.info(f"{name} span started", source=name, event=SPAN_START_EVENT)
            try:
                result = operation(*args, **kwargs)
            except BaseException as e:
                fail(span, e)
                finish(span)
                raise
            if inspect.isawaitable(result):
                # Span stays open; settle() re-activates it while awaiting
                return settle(span, result)
            succeed(span)
            finish(span)
            return result

    if inspect.iscoroutinefunction(operation):
        return async_wrapper
    return sync_wrapper


def traced(
    component: str,
    operation: Optional[str] = None,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    logger: Optional[StructuredLogger] = None
) -> Callable:
    """
    Decorator form of trace_operation.

    The span is named "<component>.<operation>"; `operation` defaults to
    the decorated function's name.

    Usage:
        class BillingService:
            @traced("BillingService")
            async def charge(self, invoice):
                ...
    """
    def decorator(func: Callable) -> Callable:
        span_name = f"{component}.{operation or func.__name__}"
        return trace_operation(span_name, func, kind=kind, logger=logger)

    return decorator


def set_span_attributes(span: Span, **attributes: Any) -> None:
    """Set attributes on a span, skipping None values."""
    for key, value in attributes.items():
        if value is not None:
            span.set_attribute(key, value)
