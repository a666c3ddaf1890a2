"""
Structured Logging with Trace Correlation

Every log call builds a LogEntry carrying the current request context,
the X-Ray trace id of the active span and the host identity, then hands
it to a sink. The default sink forwards to stdlib logging, where
StructuredFormatter renders it as JSON.
"""

import json
import logging
import socket
import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from ..exceptions import ConfigurationError
from .context import get_context_dict
from .trace_id import current_xray_trace_id

# Resolved once; constant for the process lifetime
HOSTNAME = socket.gethostname()


class LogLevel(str, Enum):
    """Log severities."""
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def levelno(self) -> int:
        return _STDLIB_LEVELS[self]


_STDLIB_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class LogEntry:
    """
    One structured log record.

    Immutable once built; the logger hands it to the sink and keeps no
    reference to it.
    """
    level: LogLevel
    message: str
    hostname: str
    context: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = None
    event: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    trace_id: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation; optional fields are omitted when absent."""
        record: Dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.value,
            "message": self.message,
        }
        if self.source is not None:
            record["source"] = self.source
        if self.event is not None:
            record["event"] = self.event
        if self.data is not None:
            record["data"] = self.data
        record["context"] = self.context
        if self.trace_id is not None:
            record["traceId"] = self.trace_id
        record["hostname"] = self.hostname
        return record


LogSink = Callable[[LogEntry], None]


def serialize_error(error: BaseException) -> Dict[str, Any]:
    """Represent an exception as plain data without losing message or stack."""
    return {
        "type": type(error).__name__,
        "message": str(error),
        "stack": "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ),
    }


class LoggingSink:
    """
    Sink that forwards entries to a stdlib logger.

    The entry travels on the record as `log_entry`; StructuredFormatter
    renders it with its field names unchanged.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def __call__(self, entry: LogEntry) -> None:
        self.logger.log(entry.level.levelno, entry.message, extra={"log_entry": entry})


class StructuredLogger:
    """
    Logger that correlates every line with the current request and trace.

    Usage:
        logger = StructuredLogger(__name__)
        logger.info("Invoice created", source="BillingService.create", data={"invoice_id": invoice_id})
        logger.error(exc, source="BillingService.create")
    """

    def __init__(self, name: Optional[str] = None, sink: Optional[LogSink] = None):
        self.name = name
        self.sink = sink or LoggingSink(logging.getLogger(name))

    def debug(self, message: str, *, source: str = None, event: str = None,
              data: Dict[str, Any] = None) -> None:
        self.log(LogLevel.DEBUG, message, source=source, event=event, data=data)

    def info(self, message: str, *, source: str = None, event: str = None,
             data: Dict[str, Any] = None) -> None:
        self.log(LogLevel.INFO, message, source=source, event=event, data=data)

    def warn(self, message: str, *, source: str = None, event: str = None,
             data: Dict[str, Any] = None) -> None:
        self.log(LogLevel.WARN, message, source=source, event=event, data=data)

    warning = warn

    def error(
        self,
        message: Union[str, BaseException],
        *,
        error: Optional[BaseException] = None,
        source: str = None,
        event: str = None,
        data: Dict[str, Any] = None
    ) -> None:
        """
        Log at error level.

        `message` may be the exception itself; it can also be passed
        alongside a message through `error`. The exception is stored under
        data["error"] with its type, message and stack.
        """
        if isinstance(message, BaseException):
            error = error or message
            message = str(message) or type(message).__name__
        if error is not None:
            data = {**(data or {}), "error": serialize_error(error)}
        self.log(LogLevel.ERROR, message, source=source, event=event, data=data)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str = None,
        event: str = None,
        data: Dict[str, Any] = None
    ) -> None:
        entry = LogEntry(
            level=LogLevel(level),
            message=message,
            source=source,
            event=event,
            data=dict(data) if data is not None else None,
            context=get_context_dict(),
            trace_id=current_xray_trace_id(),
            hostname=HOSTNAME,
        )
        self.sink(entry)


def get_logger(name: Optional[str] = None) -> StructuredLogger:
    """Get a structured logger writing to the stdlib logger `name`."""
    return StructuredLogger(name)


# Attributes every LogRecord has; anything else was passed through `extra`
_RESERVED_ATTRS = frozenset((
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName", "log_entry", "trace_id", "entry_fields",
))


class StructuredFormatter(logging.Formatter):
    """
    JSON structured log formatter with trace context.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = getattr(record, "log_entry", None)
        if isinstance(entry, LogEntry):
            return json.dumps(entry.to_dict(), default=str)

        # Records from libraries that log through stdlib directly
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            "context": get_context_dict(),
        }

        trace_id = current_xray_trace_id()
        if trace_id:
            log_entry["traceId"] = trace_id
        log_entry["hostname"] = HOSTNAME

        # Add exception info
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            try:
                json.dumps(value)  # Test if serializable
                log_entry[key] = value
            except (TypeError, ValueError):
                log_entry[key] = str(value)

        return json.dumps(log_entry)


def _plain_fields(entry: LogEntry) -> str:
    fields = {
        key: value
        for key, value in (
            ("source", entry.source),
            ("event", entry.event),
            ("data", entry.data),
            ("context", entry.context or None),
        )
        if value is not None
    }
    return " " + json.dumps(fields, default=str) if fields else ""


class TraceContextFilter(logging.Filter):
    """
    Filter that adds the X-Ray trace id to log records, and the entry
    fields the plain format appends after the message.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        entry = getattr(record, "log_entry", None)
        trace_id = entry.trace_id if isinstance(entry, LogEntry) else current_xray_trace_id()
        record.trace_id = trace_id or "no-trace"
        record.entry_fields = _plain_fields(entry) if isinstance(entry, LogEntry) else ""
        return True


def resolve_level(level: str) -> int:
    """Map a level name to its stdlib value."""
    name = level.upper()
    if name == "WARN":
        name = "WARNING"
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ConfigurationError(f"Unknown log level: {level}", setting="LOG_LEVEL")
    return value


def configure_logging(
    level: str = "INFO",
    structured: bool = True,
    service_name: str = "tracelink"
):
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        structured: Use JSON structured format; otherwise plain lines with
            source, event, data and context appended as JSON
        service_name: Service name for logs
    """
    level_no = resolve_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level_no)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Create handler
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level_no)

    # Set formatter
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(trace_id)s] %(message)s%(entry_fields)s"
        ))

    # Add trace context filter
    handler.addFilter(TraceContextFilter())

    root_logger.addHandler(handler)

    # Set levels for noisy loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("opentelemetry").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: {service_name}, level={level}, structured={structured}"
    )
