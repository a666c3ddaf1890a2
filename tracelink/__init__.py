"""
Tracelink

Log and trace correlation for server processes: every log line carries
the request context and the AWS X-Ray trace id of the active span.
"""

from typing import Optional

from opentelemetry import trace

from .config import ObservabilityConfig, config as default_config
from .exceptions import ConfigurationError, TracelinkError
from .observability import (
    RequestContext,
    StructuredLogger,
    configure_logging,
    get_logger,
    init_tracing,
    request_scope,
    trace_operation,
    traced,
)

__version__ = "0.1.0"


def init_observability(config: Optional[ObservabilityConfig] = None) -> trace.Tracer:
    """
    Configure logging and tracing for the process.

    Args:
        config: Configuration to use (environment-based default if omitted)

    Returns:
        Configured tracer

    Raises:
        ConfigurationError: If the configuration has blocking issues
    """
    config = config or default_config

    errors = [issue for issue in config.validate() if issue.startswith("ERROR")]
    if errors:
        raise ConfigurationError("; ".join(errors))

    configure_logging(
        level=config.LOG_LEVEL,
        structured=config.LOG_STRUCTURED,
        service_name=config.SERVICE_NAME,
    )
    return init_tracing(
        service_name=config.SERVICE_NAME,
        service_version=config.SERVICE_VERSION,
        otlp_endpoint=config.OTLP_ENDPOINT or None,
        console_export=config.CONSOLE_EXPORT,
    )


__all__ = [
    "ConfigurationError",
    "ObservabilityConfig",
    "RequestContext",
    "StructuredLogger",
    "TracelinkError",
    "configure_logging",
    "get_logger",
    "init_observability",
    "init_tracing",
    "request_scope",
    "trace_operation",
    "traced",
]
